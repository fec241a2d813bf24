"""
Shared Value Objects used across multiple domains.

Value Objects are immutable objects that describe characteristics of a thing.
Two value objects are equal if all their properties are equal.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


# =============================================================================
# ENUMERATIONS
# =============================================================================

class ClientType(str, Enum):
    """Client variant. Each variant carries a different tax identifier."""

    INDIVIDUAL = "individual"
    ORGANIZATION = "organization"


class ProductType(str, Enum):
    """Position of a product in the bill of materials."""

    RAW_MATERIAL = "raw_material"
    SUB_ASSEMBLY = "sub_assembly"
    FINISHED_GOOD = "finished_good"

    @property
    def is_composite(self) -> bool:
        """Composite products derive cost and stock effects from components."""
        return self is not ProductType.RAW_MATERIAL


class ProjectStatus(str, Enum):
    """Project lifecycle, in order."""

    QUOTE = "quote"
    APPROVED = "approved"
    IN_PRODUCTION = "in_production"
    COMPLETED = "completed"
    DELIVERED = "delivered"

    @classmethod
    def active(cls) -> frozenset:
        return frozenset({cls.APPROVED, cls.IN_PRODUCTION})

    @classmethod
    def awaiting_final_payment(cls) -> frozenset:
        return frozenset({cls.COMPLETED, cls.DELIVERED})


class ProjectType(str, Enum):
    """Only sale projects produce automatic transactions."""

    QUOTE = "quote"
    SALE = "sale"


class TransactionType(str, Enum):
    INFLOW = "inflow"
    OUTFLOW = "outflow"


class MovementType(str, Enum):
    IN = "in"
    OUT = "out"

    @property
    def sign(self) -> int:
        return 1 if self is MovementType.IN else -1


class PaymentMethod(str, Enum):
    CASH = "cash"
    INSTANT_TRANSFER = "instant_transfer"
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    BANK_SLIP = "bank_slip"
    BANK_TRANSFER = "bank_transfer"


class TransactionCategory:
    """Categories used by automatically emitted transactions."""

    DEPOSIT = "Deposit"
    FINAL_PAYMENT = "Final Payment"


def coerce_enum(enum_cls, value, default=None):
    """Return ``value`` as a member of ``enum_cls``, or ``default`` if it is not one."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return default


# =============================================================================
# VALUE OBJECTS
# =============================================================================

@dataclass(frozen=True)
class Address:
    """Structured postal address of a client."""

    country: str = ""
    state: str = ""
    city: str = ""
    zip_code: str = ""
    neighborhood: str = ""
    street_type: str = ""
    street: str = ""

    @property
    def street_line(self) -> str:
        return f"{self.street_type} {self.street}".strip()

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Address:
        data = data or {}
        return cls(**{k: data.get(k, "") or "" for k in cls.__dataclass_fields__})


@dataclass(frozen=True)
class PaymentTerms:
    """Agreed payment conditions of a project."""

    installments: int = 1
    payment_method: PaymentMethod = PaymentMethod.CASH
    discount_percentage: Decimal = Decimal('0')
    installment_value: Optional[Decimal] = None
    total_with_discount: Optional[Decimal] = None

    def __post_init__(self):
        if self.installments < 1:
            raise ValueError("Installments must be at least 1")
