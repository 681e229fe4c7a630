"""
User and verification-code repository interfaces.
"""

from datetime import datetime
from typing import Optional

from storefront.domain.models.user import User
from storefront.domain.models.verification import VerificationCode
from storefront.domain.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Interface for account lookups and lifecycle changes."""

    def find_by_email(self, email: str, include_deleted: bool = False) -> Optional[User]:
        ...

    def find_by_phone(self, phone: str, include_deleted: bool = False) -> Optional[User]:
        ...

    def find_by_guest(self, guest: int, include_deleted: bool = False) -> Optional[User]:
        ...

    def save(self, user: User) -> User:
        """Persist changes; raises on a uniqueness violation."""
        ...

    def hard_delete(self, user: User) -> None:
        ...

    def purge_deleted_guests(self) -> int:
        """Remove soft-deleted accounts that never linked an email or phone."""
        ...


class VerificationRepository(BaseRepository[VerificationCode]):
    """Interface for one-time phone codes."""

    def issue(self, phone: str, code: str) -> VerificationCode:
        ...

    def consume(self, phone: str, code: str, not_before: datetime) -> bool:
        """Atomically spend the newest active code for ``phone`` if it matches."""
        ...

    def expire_older_than(self, cutoff: datetime) -> int:
        ...

    def purge_inactive_older_than(self, cutoff: datetime) -> int:
        ...
