"""
Import Ledger CSV Command.
"""

from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from application.services.csv_mapping import EXPORT_FILENAMES, import_csv
from domain.shared.exceptions import DomainException
from infrastructure.persistence.collection_store import open_ledger_store


class Command(BaseCommand):
    help = 'Import ledger records of one entity type from a CSV file'

    def add_arguments(self, parser):
        parser.add_argument('entity', choices=sorted(EXPORT_FILENAMES))
        parser.add_argument('file', type=str, help='CSV file to import')

    def handle(self, *args, **options):
        path = Path(options['file'])
        if not path.exists():
            raise CommandError(f'File not found: {path}')

        store = open_ledger_store()
        try:
            imported = import_csv(store, options['entity'], path.read_text(encoding='utf-8'))
        except DomainException as e:
            raise CommandError(f'Import stopped: {e.message}') from e

        self.stdout.write(
            self.style.SUCCESS(f"Imported {imported} {options['entity']} from {path}")
        )
