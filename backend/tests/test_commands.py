"""
Tests for the ledger management commands.
"""

from __future__ import annotations

from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from infrastructure.persistence.collection_store import open_ledger_store


def _call(*args, **options):
    out = StringIO()
    call_command(*args, stdout=out, **options)
    return out.getvalue()


@pytest.mark.django_db
class TestLedgerCommands:

    def test_init_seeds_once(self):
        assert 'Demo data created' in _call('init_ledger')
        assert 'nothing seeded' in _call('init_ledger')

        store = open_ledger_store()
        assert len(store.clients) == 1
        assert store.products[0].name == "Plywood Sheet"

    def test_init_without_seed(self):
        _call('init_ledger', '--no-seed')
        assert open_ledger_store().is_empty()

    def test_export_then_import(self, tmp_path):
        _call('init_ledger')
        _call('export_ledger_csv', '--output-dir', str(tmp_path), '--xlsx')

        assert sorted(p.name for p in tmp_path.iterdir()) == [
            'clients.csv', 'ledger.xlsx', 'products.csv', 'projects.csv', 'transactions.csv',
        ]

        output = _call('import_ledger_csv', 'products', str(tmp_path / 'products.csv'))
        assert 'Imported 1 products' in output
        assert len(open_ledger_store().products) == 2

    def test_export_single_entity(self, tmp_path):
        _call('export_ledger_csv', '--output-dir', str(tmp_path), '--entity', 'clients')
        assert [p.name for p in tmp_path.iterdir()] == ['clients.csv']

    def test_import_missing_file(self, tmp_path):
        with pytest.raises(CommandError):
            _call('import_ledger_csv', 'clients', str(tmp_path / 'missing.csv'))
