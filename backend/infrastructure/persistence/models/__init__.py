"""
Persistence Models Package.

All Django ORM models for the ledger.
"""

# Base mixins
from .base import (
    TimeStampedMixin,
    VersionedMixin,
)

# Collection storage
from .collection import StoredCollection

__all__ = [
    'TimeStampedMixin',
    'VersionedMixin',
    'StoredCollection',
]
