"""Identity service — resolves Google, phone and guest credentials to accounts.

Every failure is raised as an ``ApiError`` carrying the catalog code the
client sees; nothing here builds HTTP responses.
"""

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.application.services.token_service import (
    SessionToken,
    decode_session_token,
    invalidate_session_token,
    is_revoked,
    issue_session_token,
    strip_bearer,
)
from storefront.config import Settings, get_settings
from storefront.core.exceptions import ApiError, ErrorCode
from storefront.domain.enums import AccountType
from storefront.domain.models.user import CUSTOMER_ROLE, User
from storefront.domain.repositories.user_repository import UserRepository, VerificationRepository
from storefront.domain.schemas.auth import (
    Credentials,
    GoogleCredentials,
    GuestCredentials,
    LinkRequest,
    PhoneCredentials,
    PhoneOnly,
    RefreshGuest,
    RefreshPhone,
    UpdateGoogle,
    UpdatePhone,
)
from storefront.infrastructure.database import utcnow
from storefront.infrastructure.google_oauth import GoogleIdentity, GoogleOAuthClient
from storefront.infrastructure.repositories.user_repository import (
    SQLAlchemyUserRepository,
    SQLAlchemyVerificationRepository,
)
from storefront.infrastructure.sms_gateway import SmsGatewayClient

logger = structlog.get_logger(__name__)

DEFAULT_NAME = "User"


@dataclass
class SignInResult:
    user: User
    session: Optional[SessionToken] = None


@dataclass
class VerificationDispatch:
    user: Optional[User]
    phone: str
    expires_ms: int
    gateway_response: Any = None


@dataclass
class LinkResult:
    user: User
    linked: AccountType


class IdentityResolver:
    """Account resolution for every channel."""

    def __init__(
        self,
        db: Session,
        google: GoogleOAuthClient,
        sms: SmsGatewayClient,
        users: Optional[UserRepository] = None,
        codes: Optional[VerificationRepository] = None,
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.google = google
        self.sms = sms
        self.users = users or SQLAlchemyUserRepository(db)
        self.codes = codes or SQLAlchemyVerificationRepository(db)
        self.settings = settings or get_settings()
        self.google_identity: Optional[GoogleIdentity] = None

    # -- helpers -----------------------------------------------------------

    @staticmethod
    def _require_customer(user: User) -> None:
        if not user.has_role(CUSTOMER_ROLE):
            raise ApiError(ErrorCode.MISSING_REQUIRED_PERMISSIONS)

    @staticmethod
    def _deleted(user: User) -> ApiError:
        return ApiError(ErrorCode.ACCOUNT_WAS_DELETED, additional={"user": user.recoverable_snapshot()})

    def _save(self, user: User) -> User:
        try:
            return self.users.save(user)
        except IntegrityError:
            raise ApiError(ErrorCode.ACCOUNT_ALREADY_EXISTS)

    def _verify_google(self, token: Optional[str]) -> GoogleIdentity:
        identity = self.google.verify_id_token(token)
        if identity is None:
            raise ApiError(ErrorCode.INVALID_AUTH_TOKEN)
        return identity

    def _consume_code(self, credentials: PhoneCredentials) -> None:
        not_before = utcnow() - timedelta(seconds=self.settings.VERIFICATION_TTL_SECONDS)
        if not self.codes.consume(credentials.phone, credentials.padded_code, not_before):
            logger.info("Verification code rejected")
            raise ApiError(ErrorCode.AUTHENTICATION_FAILED)

    def _ensure_free(self, owner: User, *, email: Optional[str] = None, phone: Optional[str] = None) -> None:
        """Reject a credential that already belongs to another account."""
        if email is not None:
            holder = self.users.find_by_email(email, include_deleted=True)
            if holder is not None and holder.id != owner.id:
                raise ApiError(ErrorCode.ACCOUNT_ALREADY_EXISTS)
        if phone is not None:
            holder = self.users.find_by_phone(phone, include_deleted=True)
            if holder is not None and holder.id != owner.id:
                raise ApiError(ErrorCode.ACCOUNT_ALREADY_EXISTS)

    @staticmethod
    def _apply_google(user: User, identity: GoogleIdentity) -> None:
        user.name = identity.name or user.name
        user.email = identity.email
        user.photo = identity.picture or user.photo
        user.google = identity.subject

    def _find_or_create(self, existing: Optional[User], **fields) -> User:
        if existing is not None and existing.is_deleted:
            raise self._deleted(existing)
        if existing is None:
            existing = self._save(User(role=CUSTOMER_ROLE, **fields))
            logger.info("Account created", user_id=existing.id)
        self._require_customer(existing)
        return existing

    # -- current user ------------------------------------------------------

    def resolve_current_user(self, account_type: Optional[AccountType], token_header: Optional[str]) -> User:
        """The account behind an authenticated request's headers."""
        if account_type is None:
            raise ApiError(ErrorCode.MISSING_OR_INVALID_FIELDS)

        if account_type is AccountType.GOOGLE:
            self.google_identity = self._verify_google(token_header)
            user = self.users.find_by_email(self.google_identity.email, include_deleted=True)
            if user is None:
                raise ApiError(ErrorCode.ACCOUNT_NOT_FOUND)
            if user.is_deleted:
                raise self._deleted(user)
        else:
            user = self._user_from_session(account_type, strip_bearer(token_header))

        self._require_customer(user)
        structlog.contextvars.bind_contextvars(user_id=user.id)
        return user

    def _user_from_session(self, account_type: AccountType, token: str) -> User:
        payload = decode_session_token(token) if token else None
        if payload is None or is_revoked(self.db, payload.get("jti")):
            raise ApiError(ErrorCode.INVALID_AUTH_TOKEN)
        if payload.get("channel") != account_type.value:
            raise ApiError(ErrorCode.INVALID_AUTH_TOKEN)
        try:
            user_id = int(payload.get("sub"))
        except (TypeError, ValueError):
            raise ApiError(ErrorCode.ACCOUNT_NOT_FOUND)
        user = self.users.get_by_id(user_id)
        if user is None:
            raise ApiError(ErrorCode.ACCOUNT_NOT_FOUND)
        return user

    # -- sign in -----------------------------------------------------------

    def sign_in(self, credentials: Credentials) -> SignInResult:
        if isinstance(credentials, GoogleCredentials):
            identity = self._verify_google(credentials.token)
            user = self._find_or_create(
                self.users.find_by_email(identity.email, include_deleted=True),
                name=identity.name,
                email=identity.email,
                photo=identity.picture,
                google=identity.subject,
            )
            logger.info("User signed in", channel="google", user_id=user.id)
            return SignInResult(user)

        if isinstance(credentials, PhoneCredentials):
            self._consume_code(credentials)
            user = self._find_or_create(
                self.users.find_by_phone(credentials.phone, include_deleted=True),
                name=DEFAULT_NAME,
                phone=credentials.phone,
            )
            logger.info("User signed in", channel="phone", user_id=user.id)
            return SignInResult(user, issue_session_token(user, AccountType.PHONE))

        if isinstance(credentials, GuestCredentials):
            if self.users.find_by_guest(credentials.guest, include_deleted=True) is not None:
                raise ApiError(ErrorCode.ACCOUNT_ALREADY_EXISTS)
            user = self._find_or_create(None, name=DEFAULT_NAME, guest=credentials.guest)
            logger.info("User signed in", channel="guest", user_id=user.id)
            return SignInResult(user, issue_session_token(user, AccountType.GUEST))

        raise ApiError(ErrorCode.MISSING_OR_INVALID_FIELDS)

    # -- refresh / recover / verify ----------------------------------------

    def refresh(self, account_type: AccountType, request: Union[RefreshPhone, RefreshGuest]) -> SignInResult:
        user = self.users.get_by_id(request.account_id)
        if isinstance(request, RefreshPhone):
            matches = user is not None and user.phone == request.phone
        else:
            matches = user is not None and user.guest == request.guest
        if not matches:
            raise ApiError(ErrorCode.ACCOUNT_NOT_FOUND)
        self._require_customer(user)
        return SignInResult(user, issue_session_token(user, account_type))

    def recover(self, credentials: Union[GoogleCredentials, PhoneOnly]) -> SignInResult:
        if isinstance(credentials, GoogleCredentials):
            identity = self._verify_google(credentials.token)
            user = self.users.find_by_email(identity.email, include_deleted=True)
        else:
            user = self.users.find_by_phone(credentials.phone, include_deleted=True)

        if user is None:
            raise ApiError(ErrorCode.ACCOUNT_NOT_FOUND)
        self._require_customer(user)
        if not user.is_deleted:
            raise ApiError(ErrorCode.ACCOUNT_ALREADY_EXISTS)

        user.restore()
        user = self._save(user)
        logger.info("Account recovered", user_id=user.id)

        if isinstance(credentials, PhoneOnly):
            return SignInResult(user, issue_session_token(user, AccountType.PHONE))
        return SignInResult(user)

    def request_verification(self, request: PhoneOnly) -> VerificationDispatch:
        """Issue and send a code; the account itself is created at sign-in."""
        user = self.users.find_by_phone(request.phone, include_deleted=True)
        if user is not None:
            if user.is_deleted:
                raise self._deleted(user)
            self._require_customer(user)

        code = f"{secrets.randbelow(10000):04d}"
        self.codes.issue(request.phone, code)
        logger.info("Verification code issued", user_id=user.id if user else None)

        gateway_response = self.sms.send_otp(request.phone, code)
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=self.settings.VERIFICATION_TTL_SECONDS)
        return VerificationDispatch(user, request.phone, int(expires_at.timestamp()) * 1000, gateway_response)

    # -- authenticated account operations ----------------------------------

    def sign_out(self, user: User, account_type: AccountType, token_header: Optional[str]) -> None:
        if account_type is AccountType.GOOGLE:
            self.google.revoke_token(token_header)
        else:
            invalidate_session_token(self.db, strip_bearer(token_header))

        if account_type is AccountType.GUEST and not user.has_linked_channel:
            self.users.hard_delete(user)
            logger.info("Guest account removed on sign out")
        logger.info("User signed out", channel=account_type.value)

    def link(self, user: User, request: LinkRequest) -> LinkResult:
        """Attach the channel carried by a validated ``link_rules`` model."""
        if isinstance(request, PhoneCredentials):
            target = AccountType.PHONE
            # Ownership first so a conflicting link leaves the code usable
            self._ensure_free(user, phone=request.phone)
            self._consume_code(request)
            user.phone = request.phone
            user.name = user.name or DEFAULT_NAME
        else:
            target = AccountType.GOOGLE
            identity = self._verify_google(request.token)
            self._ensure_free(user, email=identity.email)
            self._apply_google(user, identity)

        user = self._save(user)
        logger.info("Account linked", user_id=user.id, linked=target.value)
        return LinkResult(user, target)

    def update_profile(self, user: User, account_type: AccountType, request: Any) -> User:
        if account_type is AccountType.GOOGLE and isinstance(request, UpdateGoogle):
            identity = self.google_identity
            if identity is not None:
                user.name = identity.name or user.name
                user.email = identity.email
            if request.phone:
                self._ensure_free(user, phone=request.phone)
                user.phone = request.phone
        elif account_type is AccountType.PHONE and isinstance(request, UpdatePhone):
            self._ensure_free(user, phone=request.phone)
            user.name = request.name
            user.phone = request.phone
        else:
            raise ApiError(ErrorCode.MISSING_OR_INVALID_FIELDS)
        return self._save(user)

    def delete_account(self, user: User, account_type: AccountType, token_header: Optional[str]) -> None:
        guest_only = account_type is AccountType.GUEST
        self.sign_out(user, account_type, token_header)
        if guest_only:
            return
        user.soft_delete()
        self._save(user)
        logger.info("Account deleted", user_id=user.id)
