"""
Client Domain - Entities.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from domain.shared.base_entity import Clock, Entity, to_decimal
from domain.shared.value_objects import Address, ClientType, coerce_enum


@dataclass(eq=False)
class Client(Entity):
    """
    Person or organization the business sells to.

    ``type`` selects which tax identifier applies: ``person_tax_id`` for
    individuals, ``company_tax_id`` for organizations.
    """

    name: str = ""
    type: ClientType = ClientType.INDIVIDUAL
    person_tax_id: Optional[str] = None
    company_tax_id: Optional[str] = None
    email: str = ""
    phone: str = ""
    mobile: str = ""

    # Organization details
    legal_name: Optional[str] = None
    state_registration: Optional[str] = None
    tax_exempt: bool = False
    company_id: Optional[str] = None

    street_number: Optional[str] = None
    address_complement: Optional[str] = None
    address: Address = field(default_factory=Address)

    active: bool = True

    # Denormalized rollups (not recomputed by the core)
    total_projects: int = 0
    total_value: Decimal = Decimal('0')

    def __post_init__(self):
        self.type = coerce_enum(ClientType, self.type, ClientType.INDIVIDUAL)
        if isinstance(self.address, dict):
            self.address = Address.from_dict(self.address)
        self.total_value = to_decimal(self.total_value)

    @property
    def is_organization(self) -> bool:
        return self.type == ClientType.ORGANIZATION

    @property
    def tax_id(self) -> Optional[str]:
        """The tax identifier appropriate to the client type."""
        return self.company_tax_id if self.is_organization else self.person_tax_id


def create_client(clock: Optional[Clock] = None, **fields) -> Client:
    """Create a client with a fresh id and creation timestamp."""
    return Client.build(fields, required=('name',), clock=clock)
