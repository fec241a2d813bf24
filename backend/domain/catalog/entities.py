"""
Catalog Domain - Entities.

Products and the component lines that form the bill of materials.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Iterator, List, Mapping, Optional

from domain.shared.base_entity import Clock, Entity, to_decimal
from domain.shared.value_objects import ProductType, coerce_enum


@dataclass(frozen=True)
class ProductComponent:
    """
    One line of a product's bill of materials.

    ``unit_cost`` is a snapshot taken when the line was added; ``total_cost``
    is the line total for one unit of the parent product.
    """

    product_id: str
    product_name: str = ""
    quantity: Decimal = Decimal('1')
    unit: str = ""
    unit_cost: Decimal = Decimal('0')
    total_cost: Optional[Decimal] = None

    def __post_init__(self):
        object.__setattr__(self, 'quantity', to_decimal(self.quantity))
        object.__setattr__(self, 'unit_cost', to_decimal(self.unit_cost))
        if self.total_cost is None:
            object.__setattr__(self, 'total_cost', self.unit_cost * self.quantity)
        else:
            object.__setattr__(self, 'total_cost', to_decimal(self.total_cost))

    @classmethod
    def from_value(cls, value: Any) -> ProductComponent:
        if isinstance(value, ProductComponent):
            return value
        return cls(**{k: v for k, v in dict(value).items() if k in cls.__dataclass_fields__})

    def with_snapshot(self, product_name: str, unit: str, unit_cost: Decimal) -> ProductComponent:
        """Copy with name, unit and unit cost filled in from the catalog where absent."""
        if self.unit_cost:
            unit_cost = self.unit_cost
        return replace(
            self,
            product_name=self.product_name or product_name,
            unit=self.unit or unit,
            unit_cost=unit_cost,
            total_cost=unit_cost * self.quantity,
        )


@dataclass(eq=False)
class Product(Entity):
    """
    Catalog item.

    ``cost_price`` is authoritative only for raw materials; the cost of a
    composite product is derived from its components by the BOM resolver.
    """

    name: str = ""
    description: str = ""
    category: str = ""
    type: ProductType = ProductType.RAW_MATERIAL
    unit: str = "UN"
    components: List[ProductComponent] = field(default_factory=list)
    cost_price: Decimal = Decimal('0')
    sale_price: Optional[Decimal] = None
    current_stock: Decimal = Decimal('0')
    min_stock: Decimal = Decimal('0')
    supplier: Optional[str] = None

    def __post_init__(self):
        self.type = coerce_enum(ProductType, self.type, ProductType.RAW_MATERIAL)
        self.components = [ProductComponent.from_value(c) for c in (self.components or [])]
        self.cost_price = to_decimal(self.cost_price)
        self.sale_price = to_decimal(self.sale_price, default=None)
        self.current_stock = to_decimal(self.current_stock)
        self.min_stock = to_decimal(self.min_stock)

    @property
    def is_composite(self) -> bool:
        return self.type.is_composite

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.min_stock

    def component_ids(self) -> Iterator[str]:
        """Outgoing edges of this product in the component graph."""
        for component in self.components:
            yield component.product_id

    def uses(self, product_id: str) -> bool:
        return any(pid == product_id for pid in self.component_ids())


def create_product(clock: Optional[Clock] = None, **fields) -> Product:
    """Create a product with a fresh id and creation timestamp."""
    return Product.build(fields, required=('name',), clock=clock)


ProductCatalog = Mapping[str, Product]
