"""
Export Ledger CSV Command.

Writes one CSV file per entity type, and optionally an XLSX workbook.
"""

from pathlib import Path

from django.core.management.base import BaseCommand

from application.services.csv_mapping import EXPORT_FILENAMES, export_csv, export_workbook
from infrastructure.persistence.collection_store import open_ledger_store


class Command(BaseCommand):
    help = 'Export ledger records to CSV files'

    def add_arguments(self, parser):
        parser.add_argument(
            '--output-dir',
            type=str,
            default='.',
            help='Directory the files are written to'
        )
        parser.add_argument(
            '--entity',
            choices=sorted(EXPORT_FILENAMES),
            action='append',
            help='Entity type to export (repeatable, default: all)'
        )
        parser.add_argument(
            '--xlsx',
            action='store_true',
            help='Also write ledger.xlsx with one sheet per entity'
        )

    def handle(self, *args, **options):
        output_dir = Path(options['output_dir'])
        output_dir.mkdir(parents=True, exist_ok=True)
        store = open_ledger_store()

        for entity in options['entity'] or list(EXPORT_FILENAMES):
            path = output_dir / EXPORT_FILENAMES[entity]
            path.write_text(export_csv(store, entity), encoding='utf-8')
            self.stdout.write(f'  {entity}: {path}')

        if options['xlsx']:
            path = output_dir / 'ledger.xlsx'
            export_workbook(store, path)
            self.stdout.write(f'  workbook: {path}')

        self.stdout.write(self.style.SUCCESS('Export completed.'))
