"""Pydantic schemas for the address book."""

from typing import Optional

from pydantic import BaseModel

from storefront.domain.enums import AddressType
from storefront.domain.schemas.common import ItemRef, RequiredText


class PostcodeLookup(BaseModel):
    postcode: RequiredText


class AddressCreate(BaseModel):
    postcode_id: int
    name: RequiredText
    care_of: RequiredText
    phone: RequiredText
    line_1: RequiredText
    line_2: RequiredText
    type: AddressType = AddressType.HOME


class AddressUpdate(ItemRef):
    postcode_id: Optional[int] = None
    name: Optional[RequiredText] = None
    care_of: Optional[RequiredText] = None
    phone: Optional[RequiredText] = None
    line_1: Optional[RequiredText] = None
    line_2: Optional[RequiredText] = None
    type: Optional[AddressType] = None
    default: Optional[bool] = None

    def changes(self) -> dict:
        """Fields the client actually sent, minus the id and the default flag."""
        data = self.model_dump(exclude_unset=True, exclude={"id", "default"})
        if "type" in data and data["type"] is not None:
            data["type"] = data["type"].value
        return {key: value for key, value in data.items() if value is not None}
