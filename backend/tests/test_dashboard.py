"""
Tests for the dashboard query.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from application.services.dashboard import get_dashboard_stats


class TestDashboardStats:

    def test_empty_store(self, store):
        stats = get_dashboard_stats(store)
        assert stats.total_clients == 0
        assert stats.active_projects == 0
        assert stats.monthly_revenue == Decimal("0")
        assert stats.pending_payments == Decimal("0")
        assert stats.low_stock_items == 0
        assert stats.recent_activity == []

    def test_counts(self, store, client, bom):
        for status in ("quote", "approved", "in_production", "completed", "delivered"):
            store.add_project(client_id=client.id, title=status, status=status, budget="100")
        store.add_product(name="Glue", current_stock=2, min_stock=2)

        stats = get_dashboard_stats(store)
        assert stats.total_clients == 1
        assert stats.active_projects == 2
        assert stats.pending_payments == Decimal("100.0")
        assert stats.low_stock_items == 1

    def test_monthly_revenue_matches_year_and_month(self, store):
        store.add_transaction(type="inflow", amount="100", date=date(2026, 3, 1))
        store.add_transaction(type="inflow", amount="50", date=date(2026, 3, 31))
        store.add_transaction(type="outflow", amount="70", date=date(2026, 3, 10))
        store.add_transaction(type="inflow", amount="999", date=date(2025, 3, 10))
        store.add_transaction(type="inflow", amount="999", date=date(2026, 2, 28))

        assert get_dashboard_stats(store).monthly_revenue == Decimal("150")
        assert get_dashboard_stats(store, today=date(2025, 3, 1)).monthly_revenue == Decimal("999")

    def test_recent_activity(self, store, client):
        projects = [store.add_project(client_id=client.id, title=f"P{i}") for i in range(4)]
        transactions = [store.add_transaction(type="inflow", amount=1000 + i) for i in range(4)]

        activity = get_dashboard_stats(store).recent_activity
        assert len(activity) == 5
        assert [a.timestamp for a in activity] == sorted((a.timestamp for a in activity), reverse=True)
        assert [a.kind for a in activity] == ['transaction'] * 3 + ['project'] * 2
        assert activity[0].message == "Receipt: 1,003.00"
        assert activity[3].message == f"New project #{projects[3].number}: P3"
        assert transactions[0].created_at not in {a.timestamp for a in activity}
