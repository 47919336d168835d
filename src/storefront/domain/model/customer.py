"""Customer and caller identity.

The checkout core never edits customers; it reads them to address
notifications and receives an authenticated ``Identity`` on every call.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


@dataclass(frozen=True)
class Customer:
    id: str
    name: str
    email: str
    role: Role = Role.CUSTOMER


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as attached by the authentication layer."""

    id: str
    role: Role = Role.CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def can_access(self, customer_id: str) -> bool:
        return self.is_admin or self.id == customer_id

    @staticmethod
    def admin(admin_id: str) -> Identity:
        return Identity(id=admin_id, role=Role.ADMIN)

    @staticmethod
    def customer(customer_id: str) -> Identity:
        return Identity(id=customer_id, role=Role.CUSTOMER)
