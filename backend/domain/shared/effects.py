"""
Ledger Effects.

Ledger effects are the records a business-state change wants written to the
financial and inventory ledgers. Lifecycle rules return them as values; the
record store executes them in order.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional, Union

from .value_objects import MovementType, TransactionType


# =============================================================================
# DRAFTS
# =============================================================================

@dataclass(frozen=True)
class TransactionDraft:
    """A transaction that has not been assigned an id yet."""

    type: TransactionType
    category: str
    description: str
    amount: Decimal
    date: date
    project_id: Optional[str] = None
    project_title: Optional[str] = None

    def as_fields(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class StockMovementDraft:
    """A stock movement that has not been assigned an id yet."""

    product_id: str
    product_name: str
    type: MovementType
    quantity: Decimal
    date: date
    unit_price: Optional[Decimal] = None
    total_value: Optional[Decimal] = None
    project_id: Optional[str] = None
    project_title: Optional[str] = None

    def as_fields(self) -> Dict[str, Any]:
        return asdict(self)


# =============================================================================
# EFFECTS
# =============================================================================

@dataclass(frozen=True)
class EmitTransaction:
    draft: TransactionDraft

    @property
    def effect_type(self) -> str:
        return "emit_transaction"


@dataclass(frozen=True)
class EmitStockMovement:
    draft: StockMovementDraft

    @property
    def effect_type(self) -> str:
        return "emit_stock_movement"


LedgerEffect = Union[EmitTransaction, EmitStockMovement]
