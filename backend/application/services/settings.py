"""
Ledger settings access.

Reads ``LEDGER_*`` values from Django settings when they are configured,
so the domain services also run outside a Django process.
"""

from typing import Any

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


def ledger_setting(name: str, default: Any = None) -> Any:
    """Return ``settings.<name>``, or ``default`` if Django is not configured."""
    try:
        return getattr(settings, name, default)
    except ImproperlyConfigured:
        return default
