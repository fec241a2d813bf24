"""
Finance Domain - Entities.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from domain.shared.base_entity import Clock, Entity, to_date, to_decimal
from domain.shared.value_objects import TransactionType, coerce_enum


@dataclass(eq=False)
class Transaction(Entity):
    """
    One entry of the financial ledger.

    ``project_title`` is a display snapshot of the linked project.
    """

    project_id: Optional[str] = None
    project_title: Optional[str] = None
    type: TransactionType = TransactionType.INFLOW
    category: str = ""
    description: str = ""
    amount: Decimal = Decimal('0')
    date: Optional[date] = None

    def __post_init__(self):
        self.type = coerce_enum(TransactionType, self.type, TransactionType.INFLOW)
        self.amount = to_decimal(self.amount)
        self.date = to_date(self.date) or self.created_at.date()

    @property
    def is_inflow(self) -> bool:
        return self.type == TransactionType.INFLOW


def create_transaction(clock: Optional[Clock] = None, **fields) -> Transaction:
    """Create a transaction with a fresh id and creation timestamp."""
    return Transaction.build(fields, required=('type', 'amount'), clock=clock)
