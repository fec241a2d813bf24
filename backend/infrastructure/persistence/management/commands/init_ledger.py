"""
Initialize Ledger Command.

Loads the ledger from the database and seeds the demo records on a
first-time setup.
"""

from django.conf import settings
from django.core.management.base import BaseCommand

from infrastructure.persistence.collection_store import open_ledger_store


class Command(BaseCommand):
    help = 'Initialize the ledger (seed demo data when empty)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--no-seed',
            action='store_true',
            help='Do not seed demo data even if the ledger is empty'
        )

    def handle(self, *args, **options):
        store = open_ledger_store()

        seed = getattr(settings, 'LEDGER_SEED_DEMO_DATA', True) and not options['no_seed']
        if seed and store.seed_demo_data():
            self.stdout.write(self.style.SUCCESS('Demo data created.'))
        else:
            self.stdout.write('Ledger already initialized, nothing seeded.')

        store.save_all()
        self.stdout.write(
            self.style.SUCCESS(
                f'Ledger ready: {len(store.clients)} clients, '
                f'{len(store.products)} products, {len(store.projects)} projects'
            )
        )
