"""
Error catalog for the application.

Every failure a client can observe is one of the ``ErrorCode`` members below;
the catalog maps each to the human message and HTTP status sent in the error
envelope.
"""

from enum import Enum
from typing import Any, Dict, NamedTuple, Optional

from fastapi import status


class ErrorCode(str, Enum):
    INVALID_AUTH_TOKEN = "INVALID_AUTH_TOKEN"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    INCORRECT_CREDENTIALS = "INCORRECT_CREDENTIALS"
    MISSING_REQUIRED_PERMISSIONS = "MISSING_REQUIRED_PERMISSIONS"
    ACCOUNT_WAS_SUSPENDED = "ACCOUNT_WAS_SUSPENDED"
    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
    ITEM_NOT_FOUND = "ITEM_NOT_FOUND"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    ACCOUNT_ALREADY_EXISTS = "ACCOUNT_ALREADY_EXISTS"
    ACCOUNT_WAS_DELETED = "ACCOUNT_WAS_DELETED"
    MISSING_OR_INVALID_FIELDS = "MISSING_OR_INVALID_FIELDS"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"
    FEATURE_UNAVAILABLE = "FEATURE_UNAVAILABLE"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class ErrorSpec(NamedTuple):
    message: str
    status_code: int


ERROR_CATALOG: Dict[ErrorCode, ErrorSpec] = {
    ErrorCode.INVALID_AUTH_TOKEN: ErrorSpec(
        "Your OAuth token was expired.", status.HTTP_401_UNAUTHORIZED
    ),
    ErrorCode.AUTHENTICATION_FAILED: ErrorSpec(
        "Authentication failed due to invalid verification code.", status.HTTP_401_UNAUTHORIZED
    ),
    ErrorCode.INCORRECT_CREDENTIALS: ErrorSpec(
        "Your app is outdated or have an issue.", status.HTTP_401_UNAUTHORIZED
    ),
    ErrorCode.MISSING_REQUIRED_PERMISSIONS: ErrorSpec(
        "You lack the necessary permissions to access this resource.", status.HTTP_403_FORBIDDEN
    ),
    ErrorCode.ACCOUNT_WAS_SUSPENDED: ErrorSpec(
        "Your account has been suspended.", status.HTTP_404_NOT_FOUND
    ),
    ErrorCode.ACCOUNT_NOT_FOUND: ErrorSpec(
        "This account does not exists.", status.HTTP_404_NOT_FOUND
    ),
    ErrorCode.ITEM_NOT_FOUND: ErrorSpec(
        "This item does not exists.", status.HTTP_404_NOT_FOUND
    ),
    ErrorCode.RESOURCE_NOT_FOUND: ErrorSpec(
        "This route does not exists.", status.HTTP_404_NOT_FOUND
    ),
    ErrorCode.ACCOUNT_ALREADY_EXISTS: ErrorSpec(
        "An account with this credential already exists.", status.HTTP_409_CONFLICT
    ),
    ErrorCode.ACCOUNT_WAS_DELETED: ErrorSpec(
        "Your account was deleted and should be recovered before you can use it.", status.HTTP_410_GONE
    ),
    ErrorCode.MISSING_OR_INVALID_FIELDS: ErrorSpec(
        "Your app is outdated or have an issue.", 422
    ),
    ErrorCode.TOO_MANY_REQUESTS: ErrorSpec(
        "Server is busy please try again later.", status.HTTP_429_TOO_MANY_REQUESTS
    ),
    ErrorCode.FEATURE_UNAVAILABLE: ErrorSpec(
        "The feature is currently unavailable.", status.HTTP_500_INTERNAL_SERVER_ERROR
    ),
    ErrorCode.INTERNAL_SERVER_ERROR: ErrorSpec(
        "Something went wrong on our side.", status.HTTP_500_INTERNAL_SERVER_ERROR
    ),
}


class ApiError(Exception):
    """A failure that maps onto one catalog entry.

    ``exception`` is diagnostic detail that only reaches the client in debug
    mode; ``additional`` is merged into the error body unconditionally.
    """

    def __init__(
        self,
        code: ErrorCode,
        exception: Any = None,
        additional: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.exception = exception
        self.additional = additional or {}
        super().__init__(code.value)

    @property
    def status_code(self) -> int:
        return ERROR_CATALOG[self.code].status_code
