"""
Base ORM Mixins.

Provides common functionality for persistence models:
- Timestamps (created_at, updated_at)
- Version control
"""

from django.db import models


class TimeStampedMixin(models.Model):
    """Mixin for created_at and updated_at timestamps."""

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Created at"
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name="Updated at"
    )

    class Meta:
        abstract = True


class VersionedMixin(models.Model):
    """Mixin counting how many times a row has been saved."""

    version = models.PositiveIntegerField(
        default=1,
        verbose_name="Version"
    )

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if self.pk:
            self.version += 1
        super().save(*args, **kwargs)
