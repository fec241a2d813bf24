"""
Record ⇄ document mapping.

Collections are persisted as lists of JSON documents: decimals as strings,
dates and timestamps as ISO-8601, enumerations as their values.
"""

from __future__ import annotations
from dataclasses import asdict
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Type, TypeVar

from domain.shared.base_entity import Entity

E = TypeVar('E', bound=Entity)


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def to_document(record: Entity) -> Dict[str, Any]:
    """Serialize a record to a JSON-compatible dict."""
    return _jsonable(asdict(record))


def from_document(record_cls: Type[E], document: Dict[str, Any]) -> E:
    """
    Rebuild a record of ``record_cls`` from a stored document.

    Unknown keys are dropped; field types are restored by the record's
    own coercion.
    """
    known = set(record_cls.field_names())
    values = {k: v for k, v in document.items() if k in known}
    created_at = values.get('created_at')
    if isinstance(created_at, str):
        values['created_at'] = datetime.fromisoformat(created_at)
    return record_cls(**values)
