"""Auth API routes — sign in, refresh, recover, verify."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Request

from storefront.application.services.identity_service import SignInResult
from storefront.core.exceptions import ApiError, ErrorCode
from storefront.domain.enums import AccountType
from storefront.domain.schemas.auth import (
    GoogleCredentials,
    PhoneOnly,
    RefreshGuest,
    RefreshPhone,
    parse_credentials,
)
from storefront.interfaces.api.gate import ValidationGate
from storefront.interfaces.deps import get_gate

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def present(**fields: Any) -> Dict[str, Any]:
    return {key: value for key, value in fields.items() if value is not None}


def account_fields(result: SignInResult, **extra: Any) -> Dict[str, Any]:
    """User envelope extras for a freshly authenticated account."""
    fields = dict(extra)
    if result.session is not None:
        fields["o-auth-token"] = result.session.bearer
        fields["o-auth-expires"] = result.session.expires_ms
    return fields


def require_account_type(account_type: Optional[AccountType], *allowed: AccountType) -> AccountType:
    if account_type is None or (allowed and account_type not in allowed):
        raise ApiError(ErrorCode.MISSING_OR_INVALID_FIELDS)
    return account_type


@router.post("/in")
def sign_in(
    request: Request,
    payload: dict = Body(default={}),
    gate: ValidationGate = Depends(get_gate),
):
    def handler(_, values, envelope):
        account_type = require_account_type(envelope.account_type)
        result = gate.identity.sign_in(parse_credentials(account_type, request.headers, values))
        user = result.user
        fields = account_fields(
            result,
            auth=True,
            **present(
                name=user.name,
                email=user.email,
                phone=user.phone,
                photo=user.photo,
                guest=user.guest,
            ),
        )
        return envelope.success({"user": envelope.user_envelope(user, fields)})

    return gate.execute(payload, None, handler, authenticate=False)


@router.post("/refresh")
def refresh(
    request: Request,
    payload: dict = Body(default={}),
    gate: ValidationGate = Depends(get_gate),
):
    values = dict(payload)
    if "x-account-id" not in values and request.headers.get("x-account-id") is not None:
        values["x-account-id"] = request.headers["x-account-id"]

    def handler(_, values, envelope):
        account_type = require_account_type(envelope.account_type, AccountType.PHONE, AccountType.GUEST)
        rules = RefreshPhone if account_type is AccountType.PHONE else RefreshGuest
        result = gate.identity.refresh(account_type, rules.model_validate(values))
        fields = account_fields(result, **present(name=result.user.name))
        return envelope.success({"user": envelope.user_envelope(result.user, fields)})

    return gate.execute(values, None, handler, authenticate=False)


@router.post("/recover")
def recover(
    payload: dict = Body(default={}),
    gate: ValidationGate = Depends(get_gate),
):
    def handler(_, values, envelope):
        account_type = require_account_type(envelope.account_type, AccountType.GOOGLE, AccountType.PHONE)
        rules = GoogleCredentials if account_type is AccountType.GOOGLE else PhoneOnly
        result = gate.identity.recover(rules.model_validate(values))
        user = result.user
        fields = account_fields(result, **present(name=user.name, phone=user.phone))
        return envelope.success(
            {
                "user": envelope.user_envelope(user, fields),
                "message": "Account was recovered successfully.",
            }
        )

    return gate.execute(payload, None, handler, authenticate=False)


@router.post("/verify")
def verify(
    payload: dict = Body(default={}),
    gate: ValidationGate = Depends(get_gate),
):
    def handler(_, params: PhoneOnly, envelope):
        dispatch = gate.identity.request_verification(params)
        fields = {"auth": True, "phone": dispatch.phone}
        if dispatch.user is not None:
            fields = envelope.user_envelope(dispatch.user, fields) or fields
        return envelope.success(
            {
                "user": fields,
                "message": "Successfully sent OTP.",
                "expires": dispatch.expires_ms,
                "response": dispatch.gateway_response,
            }
        )

    return gate.execute(payload, PhoneOnly, handler, authenticate=False)
