"""Pydantic schemas for sign-in channels and account operations.

Each channel's credentials are a distinct model; ``parse_credentials`` turns
the ``x-account-type`` header plus the request's headers/body into exactly one
of them.
"""

from typing import Any, Literal, Mapping, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field

from storefront.domain.enums import AccountType
from storefront.domain.schemas.common import NumericString, RequiredText


class AliasedModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class GoogleCredentials(AliasedModel):
    token: RequiredText = Field(alias="o-auth-token")


class PhoneCredentials(AliasedModel):
    phone: NumericString
    code: int = Field(alias="x-verification-code", ge=0, le=9999)

    @property
    def padded_code(self) -> str:
        return f"{self.code:04d}"


# Guest ids are stored in a signed 64-bit column
GUEST_ID_MAX = 2**63 - 1


class GuestCredentials(AliasedModel):
    guest: int = Field(ge=0, le=GUEST_ID_MAX)


Credentials = Union[GoogleCredentials, PhoneCredentials, GuestCredentials]


def parse_credentials(
    account_type: AccountType,
    headers: Mapping[str, str],
    payload: Mapping[str, Any],
) -> Credentials:
    """Validate the channel-specific credential fields.

    Google reads the raw ID token from the ``o-auth-token`` header; phone and
    guest read the JSON body. Raises ``pydantic.ValidationError``.
    """
    if account_type is AccountType.GOOGLE:
        return GoogleCredentials.model_validate({"o-auth-token": headers.get("o-auth-token")})
    if account_type is AccountType.PHONE:
        return PhoneCredentials.model_validate(dict(payload))
    return GuestCredentials.model_validate(dict(payload))


class PhoneOnly(AliasedModel):
    phone: NumericString


class RefreshPhone(AliasedModel):
    account_id: int = Field(alias="x-account-id")
    phone: NumericString


class RefreshGuest(AliasedModel):
    account_id: int = Field(alias="x-account-id")
    guest: int = Field(ge=0, le=GUEST_ID_MAX)


class LinkGuest(AliasedModel):
    link_type: Literal["google", "phone"] = Field(alias="x-link-type")


class UpdateGoogle(AliasedModel):
    phone: Optional[NumericString] = None


class UpdatePhone(AliasedModel):
    name: RequiredText
    phone: NumericString


class GuestLinkPhone(LinkGuest, PhoneCredentials):
    link_type: Literal["phone"] = Field(alias="x-link-type")


class GuestLinkGoogle(LinkGuest, GoogleCredentials):
    link_type: Literal["google"] = Field(alias="x-link-type")


LinkRequest = Union[PhoneCredentials, GoogleCredentials]


def link_rules(account_type: Optional[AccountType], payload: Mapping[str, Any]) -> Optional[Type[BaseModel]]:
    """Rules for linking a second channel to an account of ``account_type``.

    Google accounts link a phone, phone accounts link Google, and guests pick
    the target with ``x-link-type``. An unknown channel gets no rules; the
    request then fails authentication instead.
    """
    if account_type is AccountType.GOOGLE:
        return PhoneCredentials
    if account_type is AccountType.PHONE:
        return GoogleCredentials
    if account_type is AccountType.GUEST:
        link_type = payload.get("x-link-type")
        if link_type == "phone":
            return GuestLinkPhone
        if link_type == "google":
            return GuestLinkGoogle
        return LinkGuest
    return None


def update_rules(account_type: Optional[AccountType]) -> Optional[Type[BaseModel]]:
    if account_type is AccountType.GOOGLE:
        return UpdateGoogle
    if account_type is AccountType.PHONE:
        return UpdatePhone
    return None
