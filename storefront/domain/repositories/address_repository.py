"""
Address Repository Interface.
"""

from typing import Optional

from sqlalchemy.orm import Query

from storefront.domain.models.address import Address, Postcode
from storefront.domain.repositories.base import BaseRepository


class AddressRepository(BaseRepository[Address]):
    """Interface for a user's address book."""

    def find_postcode(self, code: str) -> Optional[Postcode]:
        ...

    def postcode_exists(self, postcode_id: int) -> bool:
        ...

    def query_for_user(self, user_id: int, descending: bool = False, search: Optional[str] = None) -> Query:
        """Addresses with their postcode, ordered by name, optionally filtered."""
        ...

    def get_for_user(self, user_id: int, address_id: int) -> Optional[Address]:
        ...

    def count_for_user(self, user_id: int) -> int:
        ...

    def make_default(self, user_id: int, address_id: int) -> None:
        """Flag ``address_id`` as default and clear every other address of the user."""
        ...
