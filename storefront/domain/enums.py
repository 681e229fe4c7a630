"""Closed sets of values shared by models, schemas and services."""

from enum import Enum
from typing import Optional


class AccountType(str, Enum):
    """Channel a client declares in the ``x-account-type`` header."""

    GOOGLE = "google"
    PHONE = "phone"
    GUEST = "guest"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["AccountType"]:
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class AccountState(str, Enum):
    ACTIVE = "ACTIVE"
    DELETED = "DELETED"


class RecordStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class AddressType(str, Enum):
    HOME = "HOME"
    OFFICE = "OFFICE"
    OTHER = "OTHER"


class SortOrder(str, Enum):
    ASC = "asc"
    DSC = "dsc"


class ListType(str, Enum):
    """Per-user product lists; the value is the label used in messages."""

    HANDCART = "Handcart"
    FAVORITES = "Favorites"
    ORDERS = "Orders"

    @property
    def is_mutable(self) -> bool:
        return self is not ListType.ORDERS
