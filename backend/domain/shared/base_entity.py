"""
Base Entity class for all ledger records.

Entities have identity and lifecycle.
Two entities are equal if they have the same ID.
"""

from __future__ import annotations
from abc import ABC
from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple, Type, TypeVar
import random
import string
import threading
import time

from .exceptions import ValidationException


_ID_ALPHABET = string.digits + string.ascii_lowercase
_id_lock = threading.Lock()
_last_timestamp = 0


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


Clock = Callable[[], datetime]
E = TypeVar('E', bound='Entity')


def generate_id() -> str:
    """
    Generate a unique record identifier.

    The identifier is a nanosecond timestamp followed by a random base-36
    suffix. The timestamp part never goes backwards within the process, even
    if the wall clock does.
    """
    global _last_timestamp
    with _id_lock:
        now = time.time_ns()
        if now < _last_timestamp:
            now = _last_timestamp
        _last_timestamp = now
    suffix = ''.join(random.choices(_ID_ALPHABET, k=9))
    return f"{now}-{suffix}"


def to_decimal(value: Any, default: Optional[Decimal] = Decimal('0')) -> Optional[Decimal]:
    """Coerce numbers and numeric strings to Decimal."""
    if value is None or value == '':
        return default
    if isinstance(value, Decimal):
        return value
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    return result if result.is_finite() else default


def to_date(value: Any) -> Optional[date]:
    """Coerce ISO strings and datetimes to a date."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def require_fields(entity_type: str, data: Dict[str, Any], names: Iterable[str]) -> None:
    """Raise ValidationException for the first required field that is absent."""
    for name in names:
        if data.get(name) is None:
            raise ValidationException(
                f"{entity_type} field '{name}' is required",
                field=name,
            )


@dataclass
class Entity(ABC):
    """
    Base class for all ledger entities.

    Entities are defined by their identity, not their attributes.
    ``id`` and ``created_at`` are assigned once by the create helpers.
    """

    id: str = field(default_factory=generate_id)
    created_at: datetime = field(default_factory=utc_now)

    # Fields that partial updates may never overwrite
    IMMUTABLE_FIELDS = ('id', 'created_at')

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def build(
        cls: Type[E],
        data: Mapping[str, Any],
        required: Iterable[str] = (),
        clock: Optional[Clock] = None,
    ) -> E:
        """
        Create a new entity from input lacking id/created_at.

        Only required-field presence is checked here; domain validation
        belongs to the layers above. Unknown keys are ignored.
        """
        require_fields(cls.__name__, data, required)
        known = set(cls.field_names()) - set(cls.IMMUTABLE_FIELDS)
        values = {k: v for k, v in data.items() if k in known}
        return cls(
            id=generate_id(),
            created_at=(clock or utc_now)(),
            **values,
        )

    def merge(self: E, changes: Mapping[str, Any]) -> E:
        """
        Return a copy with supplied fields overwritten.

        Absent fields keep their prior value; id and created_at never change.
        """
        known = set(self.field_names()) - set(self.IMMUTABLE_FIELDS)
        values = {k: v for k, v in changes.items() if k in known}
        return replace(self, **values)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Entity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={self.id}>"
