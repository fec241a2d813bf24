"""
Stored Collection ORM Model.

Each ledger collection is kept as one row holding the list of its
JSON documents.
"""

from django.db import models

from .base import TimeStampedMixin, VersionedMixin


class StoredCollection(TimeStampedMixin, VersionedMixin):
    """
    A named collection of ledger documents.

    ``documents`` holds the records most recent first, as produced by the
    record store.
    """

    name = models.CharField(
        max_length=100,
        unique=True,
        verbose_name="Collection"
    )
    documents = models.JSONField(
        default=list,
        blank=True,
        verbose_name="Documents"
    )

    class Meta:
        db_table = 'ledger_collections'
        verbose_name = "Stored collection"
        verbose_name_plural = "Stored collections"
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({len(self.documents)} documents, v{self.version})"
