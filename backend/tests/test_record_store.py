"""
Tests for the ledger record store facade.

The store runs against the in-memory collection store, no database.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from application.services.record_store import LedgerRecordStore
from domain.shared.exceptions import (
    CircularReferenceException,
    ComponentInUseException,
    SideEffectException,
    ValidationException,
)
from domain.shared.repositories import CollectionStore
from domain.shared.value_objects import MovementType, TransactionCategory
from infrastructure.persistence.collection_store import InMemoryCollectionStore


class FailingCollectionStore(CollectionStore):

    def load(self, collection_name, default):
        raise OSError("disk unavailable")

    def save(self, collection_name, records):
        raise OSError("disk unavailable")


def _sale(store, client, **fields):
    values = dict(
        client_id=client.id,
        client_name=client.name,
        title="Wardrobe",
        type="sale",
        status="approved",
        budget="1000",
    )
    values.update(fields)
    return store.add_project(**values)


# =============================================================================
# Clients
# =============================================================================


class TestClients:

    def test_add_update_delete(self, store):
        client = store.add_client(name="Ana")
        assert store.get_client(client.id) is client

        updated = store.update_client(client.id, email="ana@example.com", id="hijack")
        assert updated.id == client.id
        assert store.get_client(client.id).email == "ana@example.com"

        assert store.delete_client(client.id) is True
        assert store.get_client(client.id) is None

    def test_missing_ids_are_no_ops(self, store):
        assert store.update_client("nope", name="X") is None
        assert store.delete_client("nope") is False

    def test_validation_happens_before_mutation(self, store):
        with pytest.raises(ValidationException):
            store.add_client(email="x@example.com")
        assert store.clients == []

    def test_most_recent_first(self, store):
        first = store.add_client(name="First")
        second = store.add_client(name="Second")
        assert store.clients == [second, first]
        store.update_client(first.id, name="First (edited)")
        assert [c.id for c in store.clients] == [second.id, first.id]


# =============================================================================
# Products
# =============================================================================


class TestProducts:

    def test_calculate_cost(self, store, bom):
        a, b = bom
        assert store.calculate_product_cost(a.id) == Decimal("120")
        assert store.calculate_product_cost(b.id) == Decimal("240")

    def test_component_snapshot_is_filled(self, store, bom):
        a, b = bom
        line = store.get_product(b.id).components[0]
        assert line.product_name == "Board"
        assert line.unit == "UN"
        assert line.unit_cost == Decimal("120")
        assert line.total_cost == Decimal("240")

    def test_self_reference_rejected(self, store, bom):
        a, _ = bom
        with pytest.raises(CircularReferenceException):
            store.update_product(a.id, components=[{'product_id': a.id, 'quantity': 1}])
        assert store.get_product(a.id).components == []

    def test_cycle_rejected_and_catalog_unchanged(self, store, bom):
        a, b = bom
        c = store.add_product(name="Cabinet", type="finished_good", components=[{'product_id': b.id}])
        with pytest.raises(CircularReferenceException):
            store.update_product(a.id, type="sub_assembly", components=[{'product_id': c.id}])
        assert store.get_product(a.id).type.value == "raw_material"
        assert store.get_product(a.id).components == []

    def test_update_without_component_change_skips_cycle_check(self, store, bom):
        a, _ = bom
        assert store.update_product(a.id, cost_price="130").cost_price == Decimal("130")

    def test_delete_component_in_use(self, store, bom):
        a, b = bom
        with pytest.raises(ComponentInUseException) as exc:
            store.delete_product(a.id)
        assert exc.value.used_in == [b.id]
        assert store.get_product(a.id) is not None

        assert store.delete_product(b.id) is True
        assert store.delete_product(a.id) is True
        assert store.delete_product(a.id) is False

    def test_available_components(self, store, bom):
        a, b = bom
        c = store.add_product(name="Hinge")
        assert [p.id for p in store.available_components(a.id)] == [c.id]
        assert len(store.available_components()) == 3


# =============================================================================
# Projects
# =============================================================================


class TestProjects:

    def test_numbers_increase(self, store, client):
        first = store.add_project(client_id=client.id, title="One")
        second = store.add_project(client_id=client.id, title="Two")
        assert (first.number, second.number) == (1, 2)

    def test_numbers_never_reused(self, store, client):
        store.add_project(client_id=client.id, title="One")
        second = store.add_project(client_id=client.id, title="Two")
        store.delete_project(second.id)
        third = store.add_project(client_id=client.id, title="Three")
        assert third.number == 3

    def test_number_survives_reload(self, store, client, collection_store, clock):
        project = store.add_project(client_id=client.id, title="One")
        store.delete_project(project.id)

        reloaded = LedgerRecordStore(collection_store=collection_store, clock=clock)
        reloaded.load()
        assert reloaded.add_project(client_id=client.id, title="Two").number == 2

    def test_sale_creation_emits_deposit(self, store, client):
        project = _sale(store, client)
        transactions = store.transactions
        assert len(transactions) == 1
        assert transactions[0].amount == Decimal("500.0")
        assert transactions[0].category == TransactionCategory.DEPOSIT
        assert transactions[0].project_id == project.id
        assert transactions[0].date == store.today()

    def test_quote_creation_emits_nothing(self, store, client):
        store.add_project(client_id=client.id, title="Estimate", type="quote", status="approved", budget=900)
        _sale(store, client, status="quote")
        assert store.transactions == []

    def test_sale_cascades_stock(self, store, client, bom):
        a, b = bom
        project = _sale(store, client, products=[
            {'product_id': b.id, 'product_name': b.name, 'quantity': 3, 'unit_price': 400},
        ])

        movements = list(reversed(store.stock_movements))
        assert [(m.product_id, m.type, m.quantity) for m in movements] == [
            (b.id, MovementType.OUT, Decimal("3")),
            (a.id, MovementType.OUT, Decimal("6")),
        ]
        assert movements[1].total_value == Decimal("720")
        assert all(m.project_id == project.id for m in movements)
        assert store.get_product(b.id).current_stock == Decimal("7")
        assert store.get_product(a.id).current_stock == Decimal("94")

    def test_completion_emits_final_payment_once(self, store, client):
        project = _sale(store, client, status="in_production")
        store.update_project(project.id, status="completed")
        store.update_project(project.id, description="Re-saved while completed")

        categories = sorted(t.category for t in store.transactions)
        assert categories == [TransactionCategory.DEPOSIT, TransactionCategory.FINAL_PAYMENT]
        final = next(t for t in store.transactions if t.category == TransactionCategory.FINAL_PAYMENT)
        assert final.amount == Decimal("500.0")
        assert final.description == f"Final payment - project #{project.number}"

    def test_update_missing_project(self, store):
        assert store.update_project("nope", status="completed") is None
        assert store.delete_project("nope") is False

    def test_delete_cascades(self, store, client, bom):
        a, b = bom
        project = _sale(store, client, products=[{'product_id': b.id, 'quantity': 3, 'unit_price': 400}])
        other = _sale(store, client, title="Other")
        store.update_project(project.id, status="completed")

        assert store.delete_project(project.id) is True
        assert not any(t.project_id == project.id for t in store.transactions)
        assert not any(m.project_id == project.id for m in store.stock_movements)
        assert [t.project_id for t in store.transactions] == [other.id]

    def test_delete_restores_stock_counters(self, store, client, bom):
        a, b = bom
        project = _sale(store, client, products=[{'product_id': b.id, 'quantity': 3, 'unit_price': 400}])
        store.delete_project(project.id)
        assert store.get_product(a.id).current_stock == Decimal("100")
        assert store.get_product(b.id).current_stock == Decimal("10")

    def test_failed_effect_keeps_project(self, store, client, monkeypatch):
        def broken(**fields):
            raise RuntimeError("ledger offline")

        monkeypatch.setattr("application.services.record_store.create_transaction", broken)
        with pytest.raises(SideEffectException) as exc:
            _sale(store, client)

        assert len(exc.value.pending_effects) == 1
        assert isinstance(exc.value.cause, RuntimeError)
        assert store.get_project(exc.value.project_id) is not None


# =============================================================================
# Transactions & stock
# =============================================================================


class TestTransactions:

    def test_crud(self, store):
        transaction = store.add_transaction(type="outflow", category="Supplies", amount="75.50")
        assert store.get_transaction(transaction.id) is transaction
        assert store.update_transaction(transaction.id, amount="80").amount == Decimal("80")
        assert store.get_transaction(transaction.id).amount == Decimal("80")
        assert store.delete_transaction(transaction.id) is True
        assert store.get_transaction(transaction.id) is None
        assert store.transactions == []
        assert store.update_transaction(transaction.id, amount="1") is None


class TestStock:

    def test_apply_movement_updates_counter(self, store, bom):
        a, _ = bom
        store.apply_movement(product_id=a.id, product_name=a.name, type="in", quantity=20)
        store.apply_movement(product_id=a.id, product_name=a.name, type="out", quantity=5)
        assert store.get_product(a.id).current_stock == Decimal("115")
        assert store.ledger_balance(a.id) == Decimal("15")

    def test_unknown_product_movement_is_recorded(self, store):
        movement = store.apply_movement(product_id="ghost", type="in", quantity=1)
        assert store.stock_movements == [movement]

    def test_cascade_project_consumption(self, store, client, bom):
        a, b = bom
        project = store.add_project(client_id=client.id, title="Manual")
        movements = store.cascade_project_consumption(
            project.id, [{'product_id': b.id, 'quantity': 2, 'unit_price': 400}],
        )
        assert [(m.product_id, m.quantity) for m in movements] == [(b.id, Decimal("2")), (a.id, Decimal("4"))]
        assert all(m.project_title == "Manual" for m in movements)
        assert store.ledger_balance(a.id) == Decimal("-4")


# =============================================================================
# Persistence
# =============================================================================


class TestPersistence:

    def test_round_trip(self, store, client, bom, collection_store, clock):
        a, b = bom
        project = _sale(store, client, products=[{'product_id': b.id, 'quantity': 1, 'unit_price': 400}])

        reloaded = LedgerRecordStore(collection_store=collection_store, clock=clock)
        reloaded.load()

        assert [c.id for c in reloaded.clients] == [c.id for c in store.clients]
        assert [p.id for p in reloaded.products] == [p.id for p in store.products]
        assert reloaded.get_project(project.id).products[0].product_id == b.id
        assert reloaded.get_client(client.id).address == client.address
        assert reloaded.calculate_product_cost(b.id) == Decimal("240")
        assert reloaded.get_product(a.id).current_stock == Decimal("98")
        assert len(reloaded.transactions) == 1
        assert len(reloaded.stock_movements) == 2

    def test_failed_load_starts_empty(self, clock):
        store = LedgerRecordStore(collection_store=FailingCollectionStore(), clock=clock)
        store.load()
        assert store.is_empty()

    def test_failed_save_keeps_memory_state(self, clock):
        store = LedgerRecordStore(collection_store=FailingCollectionStore(), clock=clock)
        client = store.add_client(name="Ana")
        assert store.get_client(client.id) is client

    def test_corrupt_collection_is_dropped(self, clock):
        backing = InMemoryCollectionStore({
            'clients': [{'id': 'c1', 'name': 'Ana', 'created_at': 'not-a-date'}],
            'products': [{'id': 'p1', 'name': 'Board', 'created_at': '2026-01-01T00:00:00+00:00'}],
        })
        store = LedgerRecordStore(collection_store=backing, clock=clock)
        store.load()
        assert store.clients == []
        assert store.get_product('p1').name == 'Board'

    def test_seed_demo_data(self, store):
        assert store.seed_demo_data() is True
        assert len(store.clients) == 1
        plywood = store.products[0]
        assert plywood.cost_price == Decimal("120.00")
        assert plywood.sale_price == Decimal("180.00")
        assert (plywood.current_stock, plywood.min_stock) == (Decimal("50"), Decimal("10"))
        assert store.seed_demo_data() is False
