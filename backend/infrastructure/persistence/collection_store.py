"""
Collection Store adapters.

Implementations of the ``CollectionStore`` port used by the record store.
"""

from copy import deepcopy
from typing import Any, Dict, List, Optional
import logging

from django.db import transaction

from domain.shared.repositories import CollectionStore

logger = logging.getLogger(__name__)


class DjangoCollectionStore(CollectionStore):
    """Keeps every collection as one ``StoredCollection`` row."""

    def load(self, collection_name: str, default: Optional[List[Dict[str, Any]]] = None):
        from infrastructure.persistence.models import StoredCollection

        row = StoredCollection.objects.filter(name=collection_name).first()
        if row is None:
            return [] if default is None else default
        return row.documents

    def save(self, collection_name: str, records: List[Dict[str, Any]]) -> None:
        from infrastructure.persistence.models import StoredCollection

        with transaction.atomic():
            row, created = StoredCollection.objects.select_for_update().get_or_create(
                name=collection_name,
                defaults={'documents': records},
            )
            if not created:
                row.documents = records
                row.save()

        logger.debug(f"Saved {len(records)} documents to {collection_name}")


class InMemoryCollectionStore(CollectionStore):
    """Dictionary-backed store. Documents are copied on the way in and out."""

    def __init__(self, initial: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self._collections: Dict[str, List[Dict[str, Any]]] = deepcopy(initial or {})

    def load(self, collection_name: str, default: Optional[List[Dict[str, Any]]] = None):
        if collection_name not in self._collections:
            return [] if default is None else default
        return deepcopy(self._collections[collection_name])

    def save(self, collection_name: str, records: List[Dict[str, Any]]) -> None:
        self._collections[collection_name] = deepcopy(records)

    def names(self) -> List[str]:
        return sorted(self._collections)


def open_ledger_store(clock=None):
    """Record store backed by the Django database, with every collection loaded."""
    from application.services.record_store import LedgerRecordStore

    store = LedgerRecordStore(collection_store=DjangoCollectionStore(), clock=clock)
    store.load()
    return store
