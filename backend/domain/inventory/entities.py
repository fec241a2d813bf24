"""
Inventory Domain - Entities.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from domain.shared.base_entity import Clock, Entity, to_date, to_decimal
from domain.shared.value_objects import MovementType, coerce_enum


@dataclass(eq=False)
class StockMovement(Entity):
    """
    One entry of the inventory ledger.

    Unit price and total value are snapshots taken when the movement is
    recorded.
    """

    product_id: str = ""
    product_name: str = ""
    type: MovementType = MovementType.IN
    quantity: Decimal = Decimal('0')
    unit_price: Optional[Decimal] = None
    total_value: Optional[Decimal] = None
    project_id: Optional[str] = None
    project_title: Optional[str] = None
    date: Optional[date] = None

    def __post_init__(self):
        self.type = coerce_enum(MovementType, self.type, MovementType.IN)
        self.quantity = to_decimal(self.quantity)
        self.unit_price = to_decimal(self.unit_price, default=None)
        self.total_value = to_decimal(self.total_value, default=None)
        self.date = to_date(self.date) or self.created_at.date()

    @property
    def signed_quantity(self) -> Decimal:
        return self.quantity * self.type.sign


def create_stock_movement(clock: Optional[Clock] = None, **fields) -> StockMovement:
    """Create a stock movement with a fresh id and creation timestamp."""
    return StockMovement.build(fields, required=('product_id', 'type', 'quantity'), clock=clock)
