"""
Dashboard Query.

Read-only aggregation over the record store.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from domain.finance.entities import Transaction
from domain.project.entities import Project
from domain.project.lifecycle import DEPOSIT_SHARE
from domain.shared.value_objects import ProjectStatus

from .record_store import LedgerRecordStore

RECENT_PER_KIND = 3
RECENT_ACTIVITY_SIZE = 5


@dataclass(frozen=True)
class ActivityEntry:
    kind: str
    message: str
    timestamp: datetime


@dataclass(frozen=True)
class DashboardStats:
    total_clients: int = 0
    active_projects: int = 0
    monthly_revenue: Decimal = Decimal('0')
    pending_payments: Decimal = Decimal('0')
    low_stock_items: int = 0
    recent_activity: List[ActivityEntry] = field(default_factory=list)


def _project_activity(project: Project) -> ActivityEntry:
    return ActivityEntry(
        kind='project',
        message=f"New project #{project.number}: {project.title}",
        timestamp=project.created_at,
    )


def _transaction_activity(transaction: Transaction) -> ActivityEntry:
    label = 'Receipt' if transaction.is_inflow else 'Payment'
    return ActivityEntry(
        kind='transaction',
        message=f"{label}: {transaction.amount:,.2f}",
        timestamp=transaction.created_at,
    )


def get_dashboard_stats(store: LedgerRecordStore, today: Optional[date] = None) -> DashboardStats:
    """
    Compute the dashboard figures.

    ``monthly_revenue`` covers inflows dated in the calendar month of
    ``today`` (the store's clock by default). ``pending_payments`` counts
    the final share of every completed or delivered project's budget.
    """
    today = today or store.today()
    projects = store.projects
    transactions = store.transactions

    active = ProjectStatus.active()
    awaiting = ProjectStatus.awaiting_final_payment()

    monthly_revenue = sum(
        (
            t.amount for t in transactions
            if t.is_inflow and t.date.year == today.year and t.date.month == today.month
        ),
        Decimal('0'),
    )
    pending_payments = sum(
        (p.budget * DEPOSIT_SHARE for p in projects if p.status in awaiting),
        Decimal('0'),
    )

    activity = (
        [_project_activity(p) for p in projects[:RECENT_PER_KIND]]
        + [_transaction_activity(t) for t in transactions[:RECENT_PER_KIND]]
    )
    activity.sort(key=lambda entry: entry.timestamp, reverse=True)

    return DashboardStats(
        total_clients=len(store.clients),
        active_projects=sum(1 for p in projects if p.status in active),
        monthly_revenue=monthly_revenue,
        pending_payments=pending_payments,
        low_stock_items=sum(1 for p in store.products if p.is_low_stock),
        recent_activity=activity[:RECENT_ACTIVITY_SIZE],
    )
