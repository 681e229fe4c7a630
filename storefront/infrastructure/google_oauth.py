"""Google OAuth HTTP client — ID token verification and revocation.

Calls are single-attempt: a token that cannot be verified is simply invalid.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from storefront.config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GoogleIdentity:
    subject: str
    email: str
    name: Optional[str] = None
    picture: Optional[str] = None


class GoogleOAuthClient:
    """Client for Google's token-info and revoke endpoints."""

    def __init__(self, settings: Optional[Settings] = None, timeout: float = 10):
        settings = settings or get_settings()
        self.tokeninfo_url = settings.GOOGLE_TOKENINFO_URL
        self.revoke_url = settings.GOOGLE_REVOKE_URL
        self.client_id = settings.GOOGLE_CLIENT_ID
        self.timeout = timeout

    def verify_id_token(self, token: Optional[str]) -> Optional[GoogleIdentity]:
        """Return the identity behind ``token`` or ``None`` when Google rejects it."""
        if not token:
            return None
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.get(self.tokeninfo_url, params={"id_token": token})
        except httpx.HTTPError as e:
            logger.warning(f"Google token verification unreachable: {e}")
            return None

        if response.status_code != 200:
            logger.info(f"Google rejected ID token ({response.status_code})")
            return None

        payload = response.json()
        if self.client_id and payload.get("aud") != self.client_id:
            logger.warning("Google ID token issued for another audience")
            return None
        if not payload.get("sub") or not payload.get("email"):
            return None

        return GoogleIdentity(
            subject=str(payload["sub"]),
            email=payload["email"],
            name=payload.get("name"),
            picture=payload.get("picture"),
        )

    def revoke_token(self, token: Optional[str]) -> bool:
        if not token:
            return False
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(
                    self.revoke_url,
                    data={"token": token},
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
        except httpx.HTTPError as e:
            logger.warning(f"Google token revocation failed: {e}")
            return False
        return response.status_code == 200
