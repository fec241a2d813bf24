"""
Shared fixtures for the ledger tests.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from application.services.record_store import LedgerRecordStore
from domain.catalog.entities import create_product
from infrastructure.persistence.collection_store import InMemoryCollectionStore


class TickingClock:
    """Clock that advances one second per reading."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


@pytest.fixture
def clock():
    return TickingClock(datetime(2026, 3, 15, 10, 0, tzinfo=timezone.utc))


@pytest.fixture
def collection_store():
    return InMemoryCollectionStore()


@pytest.fixture
def store(collection_store, clock):
    return LedgerRecordStore(collection_store=collection_store, clock=clock)


@pytest.fixture
def client(store):
    return store.add_client(name="Maria Souza", type="individual", person_tax_id="987.654.321-00")


@pytest.fixture
def bom(store):
    """Raw material A (cost 120) and sub-assembly B made of 2 x A."""
    a = store.add_product(name="Board", type="raw_material", cost_price="120", current_stock=100)
    b = store.add_product(
        name="Panel",
        type="sub_assembly",
        sale_price="400",
        current_stock=10,
        components=[{'product_id': a.id, 'quantity': 2}],
    )
    return a, b


@pytest.fixture
def catalog():
    """Plain product mapping for domain-level tests."""
    a = create_product(name="Board", type="raw_material", cost_price=Decimal("120"))
    b = create_product(
        name="Panel",
        type="sub_assembly",
        components=[{'product_id': a.id, 'product_name': "Board", 'quantity': 2, 'unit_cost': 120}],
    )
    return {a.id: a, b.id: b}
