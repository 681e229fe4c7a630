"""SMS gateway HTTP client for one-time verification codes.

The gateway's reply is handed back to the caller as-is; delivery is not
confirmed and nothing is retried.
"""

import logging
from typing import Any, Optional

import httpx

from storefront.config import Settings, get_settings

logger = logging.getLogger(__name__)


class SmsGatewayClient:
    """Client for the third-party OTP SMS route."""

    def __init__(self, settings: Optional[Settings] = None, timeout: float = 30):
        settings = settings or get_settings()
        self.url = settings.SMS_API_URL
        self.headers = {
            "authorization": settings.SMS_API_KEY,
            "Content-Type": "application/json",
        }
        self.timeout = timeout

    def send_otp(self, phone: str, code: str) -> Any:
        """Dispatch ``code`` to ``phone``; returns the raw gateway response."""
        if not self.url:
            logger.warning("SMS_API_URL is not configured, verification code not dispatched")
            return None

        payload = {"route": "otp", "variables_values": code, "numbers": phone}
        try:
            with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
                response = client.post(self.url, json=payload, headers=self.headers)
        except httpx.HTTPError as e:
            logger.warning(f"SMS gateway request failed: {e}")
            return None

        try:
            return response.json()
        except ValueError:
            return response.text
