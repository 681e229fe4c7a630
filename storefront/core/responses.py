"""
Response envelope — the uniform JSON wrapper every endpoint returns.

Success: ``{"success": true, "code": 200, "body": {...}}``
Error:   ``{"success": false, "code": <status>, "body": {"error", "message", ...}}``

Entities are passed through ``shape_entity`` before they leave the service so
that foreign keys, nulls, internal prices and timestamps never reach clients.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Query

from storefront.config import get_settings
from storefront.core.exceptions import ERROR_CATALOG, ApiError, ErrorCode
from storefront.domain.enums import AccountType

INTERNAL_FIELDS = frozenset({"purchase_price", "created_at", "updated_at", "deleted_at"})


class EnvelopeResponse(JSONResponse):
    """Compact JSON with unescaped unicode; indented when ``?pretty=true``."""

    def __init__(self, content: Any, status_code: int = 200, pretty: bool = False, **kwargs):
        self.pretty = pretty
        super().__init__(content, status_code=status_code, **kwargs)

    def render(self, content: Any) -> bytes:
        if self.pretty:
            return json.dumps(content, ensure_ascii=False, indent=4, default=str).encode("utf-8")
        return json.dumps(
            content, ensure_ascii=False, separators=(",", ":"), default=str
        ).encode("utf-8")


def wants_pretty(request: Optional[Request]) -> bool:
    return request is not None and request.query_params.get("pretty") == "true"


def shape_entity(entity: Any) -> Any:
    """Strip ``*_id`` keys, null values and internal fields, recursively.

    ORM entities are first turned into dicts through their ``to_dict`` (which
    applies the entity's own deny-list). Applying this twice is a no-op.
    """
    if hasattr(entity, "to_dict"):
        entity = entity.to_dict()
    if isinstance(entity, Mapping):
        return {
            key: shape_entity(value)
            for key, value in entity.items()
            if value is not None and not key.endswith("_id") and key not in INTERNAL_FIELDS
        }
    if isinstance(entity, (list, tuple)):
        return [shape_entity(item) for item in entity]
    return entity


@dataclass
class Page:
    items: List[Any] = field(default_factory=list)
    page: int = 1
    limit: int = 25
    total: int = 0
    next_page: Optional[str] = None

    @property
    def has_more(self) -> bool:
        return self.page * self.limit < self.total


def _query_int(request: Request, name: str, default: int) -> int:
    try:
        return max(int(request.query_params.get(name, default)), 1)
    except (TypeError, ValueError):
        return default


def shape_list(query: Any, request: Optional[Request] = None) -> Page:
    """Shape every item of ``query``.

    With a request the query is paginated by its ``limit``/``page`` parameters;
    without one ``query`` is an already materialised collection.
    """
    if request is None:
        items = [shape_entity(item) for item in query]
        return Page(items=items, page=1, limit=max(len(items), 1), total=len(items))

    limit = _query_int(request, "limit", get_settings().DEFAULT_PAGE_SIZE)
    page = _query_int(request, "page", 1)

    if isinstance(query, Query):
        total = query.order_by(None).count()
        rows = query.offset((page - 1) * limit).limit(limit).all()
    else:
        materialised = list(query)
        total = len(materialised)
        rows = materialised[(page - 1) * limit: page * limit]

    result = Page(items=[shape_entity(row) for row in rows], page=page, limit=limit, total=total)
    if result.has_more:
        result.next_page = str(request.url.include_query_params(page=page + 1))
    return result


class ResponseEnvelope:
    """Builds envelopes for one request."""

    def __init__(self, request: Optional[Request] = None, debug: Optional[bool] = None):
        self.request = request
        self.debug = get_settings().APP_DEBUG if debug is None else debug

    @property
    def account_type(self) -> Optional[AccountType]:
        if self.request is None:
            return None
        return AccountType.parse(self.request.headers.get("x-account-type"))

    def success(self, body: Dict[str, Any]) -> EnvelopeResponse:
        return EnvelopeResponse(
            {"success": True, "code": 200, "body": body},
            status_code=200,
            pretty=wants_pretty(self.request),
        )

    def error(
        self,
        code: ErrorCode,
        exception: Any = None,
        additional: Optional[Dict[str, Any]] = None,
    ) -> EnvelopeResponse:
        spec = ERROR_CATALOG[code]
        body: Dict[str, Any] = {"error": code.value, "message": spec.message}
        if self.debug and exception is not None:
            body["exception"] = exception if isinstance(exception, (dict, list)) else str(exception)
        body.update(additional or {})
        return EnvelopeResponse(
            {"success": False, "code": spec.status_code, "body": body},
            status_code=spec.status_code,
            pretty=wants_pretty(self.request),
        )

    def from_error(self, exc: ApiError) -> EnvelopeResponse:
        return self.error(exc.code, exc.exception, exc.additional)

    def user_envelope(self, user, additional: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """``{x-account-id, x-account-type, ...}``; ``None`` for an unknown channel."""
        account_type = self.account_type
        if account_type is None:
            return None
        return {"x-account-id": user.id, "x-account-type": account_type.value, **(additional or {})}

    def shape_list(self, query: Any, paginate: bool = True) -> Page:
        return shape_list(query, self.request if paginate else None)

    def page_body(self, user, result: Page, **extra: Any) -> Dict[str, Any]:
        """Body of a paginated listing: user, items, extras and ``next_page``."""
        body: Dict[str, Any] = {"user": self.user_envelope(user), "items": result.items, **extra}
        if result.next_page:
            body["next_page"] = result.next_page
        return body

