"""
Project Domain - Entities.

Projects and the product line items they sell.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, List, Optional

from domain.shared.base_entity import Clock, Entity, generate_id, to_date, to_decimal
from domain.shared.value_objects import (
    PaymentMethod,
    PaymentTerms,
    ProjectStatus,
    ProjectType,
    coerce_enum,
)


@dataclass(frozen=True)
class ProjectProduct:
    """
    A product line of a project.

    The unit price is captured when the line is added and does not follow
    later catalog price changes.
    """

    product_id: str
    product_name: str = ""
    quantity: Decimal = Decimal('1')
    unit_price: Decimal = Decimal('0')
    total_price: Optional[Decimal] = None
    id: str = field(default_factory=generate_id)

    def __post_init__(self):
        object.__setattr__(self, 'quantity', to_decimal(self.quantity))
        object.__setattr__(self, 'unit_price', to_decimal(self.unit_price))
        if self.total_price is None:
            object.__setattr__(self, 'total_price', self.unit_price * self.quantity)
        else:
            object.__setattr__(self, 'total_price', to_decimal(self.total_price))

    @classmethod
    def from_value(cls, value: Any) -> ProjectProduct:
        if isinstance(value, ProjectProduct):
            return value
        data = {k: v for k, v in dict(value).items() if k in cls.__dataclass_fields__}
        if not data.get('id'):
            data.pop('id', None)
        return cls(**data)


def _installments(value: Any) -> int:
    count = to_decimal(value, default=Decimal('1'))
    return int(count) if count >= 1 else 1


def _payment_terms(value: Any) -> Optional[PaymentTerms]:
    if value is None or isinstance(value, PaymentTerms):
        return value
    data = dict(value)
    return PaymentTerms(
        installments=_installments(data.get('installments')),
        payment_method=coerce_enum(PaymentMethod, data.get('payment_method'), PaymentMethod.CASH),
        discount_percentage=to_decimal(data.get('discount_percentage')),
        installment_value=to_decimal(data.get('installment_value'), default=None),
        total_with_discount=to_decimal(data.get('total_with_discount'), default=None),
    )


@dataclass(eq=False)
class Project(Entity):
    """
    A unit of work for a client: a quote or a sale.

    ``number`` is assigned by the record store when the project is added
    and is never reused.
    """

    number: int = 0
    client_id: str = ""
    client_name: Optional[str] = None
    title: str = ""
    description: str = ""
    status: ProjectStatus = ProjectStatus.QUOTE
    type: ProjectType = ProjectType.QUOTE
    products: List[ProjectProduct] = field(default_factory=list)
    budget: Decimal = Decimal('0')
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    # Costing
    materials_cost: Optional[Decimal] = None
    labor_cost: Optional[Decimal] = None
    profit_margin: Optional[Decimal] = None

    payment_terms: Optional[PaymentTerms] = None

    IMMUTABLE_FIELDS = ('id', 'created_at', 'number')

    def __post_init__(self):
        self.status = coerce_enum(ProjectStatus, self.status, ProjectStatus.QUOTE)
        self.type = coerce_enum(ProjectType, self.type, ProjectType.QUOTE)
        self.products = [ProjectProduct.from_value(p) for p in (self.products or [])]
        self.budget = to_decimal(self.budget)
        self.start_date = to_date(self.start_date)
        self.end_date = to_date(self.end_date)
        self.materials_cost = to_decimal(self.materials_cost, default=None)
        self.labor_cost = to_decimal(self.labor_cost, default=None)
        self.profit_margin = to_decimal(self.profit_margin, default=None)
        self.payment_terms = _payment_terms(self.payment_terms)

    @property
    def is_sale(self) -> bool:
        return self.type == ProjectType.SALE

    @property
    def is_completed(self) -> bool:
        return self.status == ProjectStatus.COMPLETED


def create_project(clock: Optional[Clock] = None, **fields) -> Project:
    """
    Create a project with a fresh id and creation timestamp.

    The project number is left at 0; the record store assigns it.
    """
    return Project.build(fields, required=('title',), clock=clock)
