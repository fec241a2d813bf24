"""
Tests for BOM cost rollup and cycle detection.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from domain.catalog.bom import BOMResolver
from domain.catalog.entities import ProductComponent, create_product
from domain.shared.exceptions import CircularReferenceException, DanglingComponentException


def _catalog(*products):
    return {p.id: p for p in products}


def _uses(*pairs):
    return [{'product_id': product.id, 'quantity': quantity} for product, quantity in pairs]


# =============================================================================
# Cost resolution
# =============================================================================


class TestResolveCost:

    def test_raw_material_is_its_cost_price(self):
        a = create_product(name="A", cost_price="120")
        assert BOMResolver(_catalog(a)).resolve_cost(a.id) == Decimal("120")

    def test_sub_assembly_rolls_up(self, catalog):
        b = next(p for p in catalog.values() if p.name == "Panel")
        assert BOMResolver(catalog).resolve_cost(b.id) == Decimal("240")

    def test_nested_rollup(self):
        a = create_product(name="A", cost_price="10")
        b = create_product(name="B", type="sub_assembly", components=_uses((a, 3)))
        c = create_product(name="C", type="finished_good", components=_uses((b, 2), (a, "0.5")))
        resolver = BOMResolver(_catalog(a, b, c))
        assert resolver.resolve_cost(c.id) == Decimal("65.0")

    def test_composite_ignores_own_cost_price(self):
        a = create_product(name="A", cost_price="10")
        b = create_product(name="B", type="sub_assembly", cost_price="999", components=_uses((a, 1)))
        assert BOMResolver(_catalog(a, b)).resolve_cost(b.id) == Decimal("10")

    def test_shared_component_counted_per_use(self):
        a = create_product(name="A", cost_price="4")
        b = create_product(name="B", type="sub_assembly", components=_uses((a, 1)))
        c = create_product(name="C", type="sub_assembly", components=_uses((a, 2)))
        d = create_product(name="D", type="finished_good", components=_uses((b, 1), (c, 1)))
        assert BOMResolver(_catalog(a, b, c, d)).resolve_cost(d.id) == Decimal("12")

    def test_unknown_product_costs_zero(self):
        assert BOMResolver({}).resolve_cost("missing") == Decimal("0")

    def test_missing_component_contributes_zero(self):
        a = create_product(name="A", cost_price="5")
        b = create_product(
            name="B", type="sub_assembly",
            components=_uses((a, 2)) + [{'product_id': "ghost", 'quantity': 3}],
        )
        assert BOMResolver(_catalog(a, b)).resolve_cost(b.id) == Decimal("10")

    def test_strict_mode_rejects_missing_component(self):
        b = create_product(name="B", type="sub_assembly", components=[{'product_id': "ghost"}])
        with pytest.raises(DanglingComponentException):
            BOMResolver(_catalog(b), strict=True).resolve_cost(b.id)

    def test_existing_cycle_raises(self):
        a = create_product(name="A", type="sub_assembly")
        b = create_product(name="B", type="sub_assembly", components=_uses((a, 1)))
        a.components = [ProductComponent(product_id=b.id)]
        with pytest.raises(CircularReferenceException) as exc:
            BOMResolver(_catalog(a, b)).resolve_cost(a.id)
        assert set(exc.value.product_ids) == {a.id, b.id}

    def test_lookup_callable(self):
        a = create_product(name="A", cost_price="7")
        assert BOMResolver(_catalog(a).get).resolve_cost(a.id) == Decimal("7")

    def test_line_cost(self, catalog):
        a = next(p for p in catalog.values() if p.name == "Board")
        line = ProductComponent(product_id=a.id, quantity=3)
        assert BOMResolver(catalog).line_cost(line) == Decimal("360")


# =============================================================================
# Cycle detection
# =============================================================================


class TestCycleDetection:

    def test_self_reference(self):
        a = create_product(name="A")
        assert BOMResolver(_catalog(a)).would_create_cycle(a.id, a.id)

    def test_direct_cycle(self, catalog):
        a = next(p for p in catalog.values() if p.name == "Board")
        b = next(p for p in catalog.values() if p.name == "Panel")
        resolver = BOMResolver(catalog)
        assert resolver.would_create_cycle(a.id, b.id)
        assert not resolver.would_create_cycle(b.id, a.id)

    def test_transitive_cycle(self):
        a = create_product(name="A")
        b = create_product(name="B", type="sub_assembly", components=_uses((a, 1)))
        c = create_product(name="C", type="sub_assembly", components=_uses((b, 1)))
        assert BOMResolver(_catalog(a, b, c)).would_create_cycle(a.id, c.id)

    def test_terminates_on_existing_cycle_elsewhere(self):
        x = create_product(name="X", type="sub_assembly")
        y = create_product(name="Y", type="sub_assembly", components=_uses((x, 1)))
        x.components = [ProductComponent(product_id=y.id)]
        z = create_product(name="Z")
        assert not BOMResolver(_catalog(x, y, z)).would_create_cycle(z.id, x.id)

    def test_check_components_raises(self):
        a = create_product(name="A")
        b = create_product(name="B", type="sub_assembly", components=_uses((a, 1)))
        resolver = BOMResolver(_catalog(a, b))
        with pytest.raises(CircularReferenceException):
            resolver.check_components(a.id, [ProductComponent(product_id=b.id)])

    def test_available_components_excludes_ancestors(self):
        a = create_product(name="A")
        b = create_product(name="B", type="sub_assembly", components=_uses((a, 1)))
        c = create_product(name="C")
        available = BOMResolver(_catalog(a, b, c)).available_components(a.id)
        assert {p.name for p in available} == {"C"}

    def test_available_components_needs_mapping(self):
        with pytest.raises(TypeError):
            BOMResolver(lambda pid: None).available_components("a")
