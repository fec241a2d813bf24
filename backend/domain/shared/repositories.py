"""
Shared Repository Interfaces (Ports).

The ledger keeps its records in memory and persists each collection as a
whole through a document store keyed by collection name. The actual
implementations are in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class CollectionStore(ABC):
    """Repository interface for whole-collection persistence."""

    @abstractmethod
    def load(self, collection_name: str, default: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Load a collection as an ordered list of documents, or ``default`` if absent."""
        pass

    @abstractmethod
    def save(self, collection_name: str, records: List[Dict[str, Any]]) -> None:
        """Replace a collection with ``records``."""
        pass
