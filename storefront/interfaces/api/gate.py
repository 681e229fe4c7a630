"""
Validation gate — the validate → authenticate → handle pipeline every route runs.
"""

from typing import Any, Callable, Mapping, Optional, Type

import structlog
from fastapi import Request
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from storefront.application.services.identity_service import IdentityResolver
from storefront.core.exceptions import ApiError, ErrorCode
from storefront.core.handlers import field_errors
from storefront.core.responses import EnvelopeResponse, ResponseEnvelope
from storefront.domain.models.user import User

logger = structlog.get_logger(__name__)

Handler = Callable[[Optional[User], Any, ResponseEnvelope], EnvelopeResponse]


class ValidationGate:
    """Runs one request through field validation, authentication and its handler.

    Failures never escape: a ``ValidationError`` becomes
    MISSING_OR_INVALID_FIELDS with per-field detail, an ``ApiError`` becomes
    its own envelope, and anything else is logged and reported as
    INTERNAL_SERVER_ERROR.
    """

    def __init__(self, request: Request, db: Session, identity: IdentityResolver):
        self.request = request
        self.db = db
        self.identity = identity
        self.envelope = ResponseEnvelope(request)

    @property
    def token(self) -> Optional[str]:
        return self.request.headers.get("o-auth-token")

    def execute(
        self,
        values: Mapping[str, Any],
        rules: Optional[Type[BaseModel]],
        handler: Handler,
        authenticate: bool = True,
    ) -> EnvelopeResponse:
        try:
            params = rules.model_validate(dict(values)) if rules is not None else dict(values)
            user = None
            if authenticate:
                user = self.identity.resolve_current_user(self.envelope.account_type, self.token)
            return handler(user, params, self.envelope)
        except ValidationError as e:
            self.db.rollback()
            return self.envelope.error(
                ErrorCode.MISSING_OR_INVALID_FIELDS,
                additional={"errors": field_errors(e.errors())},
            )
        except ApiError as e:
            self.db.rollback()
            return self.envelope.from_error(e)
        except Exception as e:
            self.db.rollback()
            logger.exception("Handler failed", path=self.request.url.path)
            return self.envelope.error(ErrorCode.INTERNAL_SERVER_ERROR, e)
