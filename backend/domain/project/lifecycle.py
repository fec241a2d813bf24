"""
Project Domain - Lifecycle rules.

Derives ledger effects from project creation and status changes:

- a sale created past the quote stage receives a deposit of half its
  budget and consumes the stock of its line items;
- a sale entering ``completed`` receives the remaining half as final payment.

The rules return effects as values and never touch a store. Status
transitions are not guarded: a project may move backwards or skip states.
"""

from __future__ import annotations
from datetime import date
from decimal import Decimal
from typing import Any, List, Mapping, Tuple

from domain.catalog.entities import Product
from domain.inventory.ledger import plan_project_consumption
from domain.shared.effects import (
    EmitStockMovement,
    EmitTransaction,
    LedgerEffect,
    TransactionDraft,
)
from domain.shared.value_objects import (
    ProjectStatus,
    TransactionCategory,
    TransactionType,
)

from .entities import Project


# Share of the budget collected at each payment milestone
DEPOSIT_SHARE = Decimal('0.5')


def deposit_amount(project: Project) -> Decimal:
    return project.budget * DEPOSIT_SHARE


def final_payment_amount(project: Project) -> Decimal:
    return project.budget - deposit_amount(project)


def plan_creation(
    project: Project,
    products: Mapping[str, Product],
    today: date,
) -> List[LedgerEffect]:
    """Effects of adding ``project`` to the ledger."""
    if not project.is_sale or project.status == ProjectStatus.QUOTE:
        return []

    effects: List[LedgerEffect] = [
        EmitTransaction(TransactionDraft(
            type=TransactionType.INFLOW,
            category=TransactionCategory.DEPOSIT,
            description=f"Deposit for project #{project.number} - {project.title}",
            amount=deposit_amount(project),
            date=today,
            project_id=project.id,
            project_title=project.title,
        ))
    ]

    if project.products:
        drafts = plan_project_consumption(
            project.id,
            project.products,
            products,
            on_date=today,
            project_title=project.title,
        )
        effects.extend(EmitStockMovement(draft) for draft in drafts)

    return effects


def transition(
    project: Project,
    updates: Mapping[str, Any],
    today: date,
) -> Tuple[Project, List[LedgerEffect]]:
    """
    Apply a partial update to ``project``.

    Returns the updated project and the effects of the change. Only the
    entry into ``completed`` has an effect; saving a project that is
    already completed emits nothing.
    """
    updated = project.merge(updates)
    effects: List[LedgerEffect] = []

    entered_completed = updated.is_completed and not project.is_completed
    if entered_completed and updated.is_sale:
        effects.append(EmitTransaction(TransactionDraft(
            type=TransactionType.INFLOW,
            category=TransactionCategory.FINAL_PAYMENT,
            description=f"Final payment - project #{updated.number}",
            amount=final_payment_amount(project),
            date=today,
            project_id=updated.id,
            project_title=project.title,
        )))

    return updated, effects
