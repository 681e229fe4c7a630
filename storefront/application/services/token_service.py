"""Session token service — JWT issuance, verification and blacklisting."""

import uuid
from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Optional

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from storefront.config import get_settings
from storefront.domain.enums import AccountType
from storefront.domain.models.revoked_token import RevokedToken
from storefront.domain.models.user import User
from storefront.infrastructure.database import utcnow

BEARER_PREFIX = "Bearer "


class SessionToken(NamedTuple):
    token: str
    expires_at: datetime

    @property
    def bearer(self) -> str:
        return f"{BEARER_PREFIX}{self.token}"

    @property
    def expires_ms(self) -> int:
        return int(self.expires_at.timestamp()) * 1000


def strip_bearer(header: Optional[str]) -> str:
    if not header:
        return ""
    return header.replace(BEARER_PREFIX, "", 1).strip()


def issue_session_token(
    user: User, account_type: AccountType, expires_delta: Optional[timedelta] = None
) -> SessionToken:
    settings = get_settings()
    now = datetime.now(timezone.utc).replace(microsecond=0)
    expire = now + (expires_delta or timedelta(minutes=settings.JWT_EXPIRATION_MINUTES))
    claims = {
        "sub": str(user.id),
        "channel": account_type.value,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": expire,
    }
    token = jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return SessionToken(token=token, expires_at=expire)


def decode_session_token(token: str) -> Optional[dict]:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


def is_revoked(db: Session, jti: Optional[str]) -> bool:
    if not jti:
        return True
    return db.query(RevokedToken.id).filter(RevokedToken.jti == jti).first() is not None


def invalidate_session_token(db: Session, token: str) -> bool:
    """Blacklist ``token`` until it would have expired anyway."""
    payload = decode_session_token(token)
    if payload is None or is_revoked(db, payload.get("jti")):
        return False
    expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc).replace(tzinfo=None)
    db.add(RevokedToken(jti=payload["jti"], expires_at=expires_at))
    db.commit()
    return True


def purge_expired_revocations(db: Session) -> int:
    count = (
        db.query(RevokedToken)
        .filter(RevokedToken.expires_at <= utcnow())
        .delete(synchronize_session=False)
    )
    db.commit()
    return count
