"""
Inventory Domain - Stock ledger rules.

Applies movements to product stock counters and expands the sale of a
composite product into depletions of its components.
"""

from __future__ import annotations
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Mapping, Optional
import logging

from domain.catalog.entities import Product
from domain.project.entities import ProjectProduct
from domain.shared.effects import StockMovementDraft
from domain.shared.value_objects import MovementType

from .entities import StockMovement

logger = logging.getLogger(__name__)


def apply_movement(product: Product, movement: StockMovement) -> Decimal:
    """
    Update ``product.current_stock`` by the movement's signed quantity.

    No lower bound is enforced: negative stock records a backorder.
    """
    product.current_stock = product.current_stock + movement.signed_quantity
    return product.current_stock


def stock_balance(movements: Iterable[StockMovement], product_id: str) -> Decimal:
    """Signed sum of all movements recorded for a product."""
    return sum(
        (m.signed_quantity for m in movements if m.product_id == product_id),
        Decimal('0'),
    )


def plan_project_consumption(
    project_id: str,
    line_items: Iterable[ProjectProduct],
    products: Mapping[str, Product],
    on_date: date,
    project_title: Optional[str] = None,
) -> List[StockMovementDraft]:
    """
    Outgoing movements for the products sold by a project.

    Each line item yields one movement for the sold product at the sale
    price, followed (for composite products) by one movement per direct
    component scaled by the sold quantity. Nested sub-assemblies of those
    components are not exploded further.
    """
    drafts: List[StockMovementDraft] = []

    for line in line_items:
        product = products.get(line.product_id)
        if product is None:
            logger.warning(
                f"Project {project_id}: line item references unknown product "
                f"{line.product_id}; no stock movement recorded"
            )
            continue

        drafts.append(StockMovementDraft(
            product_id=product.id,
            product_name=product.name,
            type=MovementType.OUT,
            quantity=line.quantity,
            unit_price=line.unit_price,
            total_value=line.total_price,
            project_id=project_id,
            project_title=project_title,
            date=on_date,
        ))

        if not product.is_composite:
            continue
        for component in product.components:
            drafts.append(StockMovementDraft(
                product_id=component.product_id,
                product_name=component.product_name,
                type=MovementType.OUT,
                quantity=component.quantity * line.quantity,
                unit_price=component.unit_cost,
                total_value=component.total_cost * line.quantity,
                project_id=project_id,
                project_title=project_title,
                date=on_date,
            ))

    return drafts
