"""
Catalog Domain - Bill of Materials resolution.

The components of every product form a directed graph over product ids.
BOMResolver walks that graph to roll up costs and to keep it acyclic.
"""

from __future__ import annotations
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Set, Union
import logging

from domain.shared.exceptions import (
    CircularReferenceException,
    DanglingComponentException,
)

from .entities import Product, ProductComponent

logger = logging.getLogger(__name__)


ProductLookup = Callable[[str], Optional[Product]]


class BOMResolver:
    """
    Cost rollup and cycle detection over the current product catalog.

    ``products`` is either a mapping of id to product or a lookup callable.
    With ``strict`` set, a component pointing to a product that is not in
    the catalog is an error instead of contributing zero.
    """

    def __init__(
        self,
        products: Union[Mapping[str, Product], ProductLookup],
        strict: bool = False,
    ):
        if callable(products):
            self._lookup = products
            self._all = None
        else:
            self._lookup = products.get
            self._all = products
        self.strict = strict

    # =========================================================================
    # COST RESOLUTION
    # =========================================================================

    def resolve_cost(self, product_id: str) -> Decimal:
        """
        Unit cost of a product.

        Raw materials return their ``cost_price``; composite products return
        the sum of component cost times component quantity. Unknown products
        cost 0.
        """
        product = self._lookup(product_id)
        if product is None:
            return Decimal('0')
        return self._rollup(product, path=[], memo={})

    def line_cost(self, component: ProductComponent) -> Decimal:
        """Cost of one component line for a single unit of the parent."""
        return self.resolve_cost(component.product_id) * component.quantity

    def _rollup(self, product: Product, path: List[str], memo: Dict[str, Decimal]) -> Decimal:
        if product.id in memo:
            return memo[product.id]
        if not product.is_composite:
            memo[product.id] = product.cost_price
            return product.cost_price
        if product.id in path:
            raise CircularReferenceException(path[path.index(product.id):] + [product.id])

        path.append(product.id)
        total = Decimal('0')
        for component in product.components:
            child = self._lookup(component.product_id)
            if child is None:
                if self.strict:
                    raise DanglingComponentException(product.id, component.product_id)
                logger.warning(
                    f"Product {product.id} references missing component "
                    f"{component.product_id}; counted as zero cost"
                )
                continue
            total += self._rollup(child, path, memo) * component.quantity
        path.pop()

        memo[product.id] = total
        return total

    # =========================================================================
    # CYCLE DETECTION
    # =========================================================================

    def would_create_cycle(self, candidate_product_id: str, proposed_component_id: str) -> bool:
        """
        Check whether adding ``proposed_component_id`` as a component of
        ``candidate_product_id`` would close a cycle.

        Only edges reachable from the proposed component are explored, each
        node at most once, so this terminates even if the catalog already
        contains a cycle elsewhere.
        """
        if candidate_product_id == proposed_component_id:
            return True

        visited: Set[str] = set()
        stack = [proposed_component_id]
        while stack:
            current_id = stack.pop()
            if current_id in visited:
                continue
            visited.add(current_id)

            product = self._lookup(current_id)
            if product is None:
                continue
            for child_id in product.component_ids():
                if child_id == candidate_product_id:
                    return True
                if child_id not in visited:
                    stack.append(child_id)
        return False

    def check_components(
        self,
        candidate_product_id: str,
        components: Iterable[ProductComponent],
    ) -> None:
        """Raise CircularReferenceException if any component would close a cycle."""
        for component in components:
            if self.would_create_cycle(candidate_product_id, component.product_id):
                raise CircularReferenceException(
                    [candidate_product_id, component.product_id]
                )

    def available_components(self, exclude_id: Optional[str] = None) -> List[Product]:
        """Products that can be used as a component of ``exclude_id``."""
        if self._all is None:
            raise TypeError("available_components needs a product mapping, not a lookup")
        if exclude_id is None:
            return list(self._all.values())
        return [
            product for product in self._all.values()
            if not self.would_create_cycle(exclude_id, product.id)
        ]
