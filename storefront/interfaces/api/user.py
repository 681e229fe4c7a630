"""User API routes — sign out, link, update, delete."""

from fastapi import APIRouter, Body, Depends

from storefront.domain.enums import AccountType
from storefront.domain.schemas.auth import link_rules, update_rules
from storefront.interfaces.api.auth import present
from storefront.interfaces.api.gate import ValidationGate
from storefront.interfaces.deps import get_gate

router = APIRouter(prefix="/api/user", tags=["User"])

LINK_MESSAGES = {
    (AccountType.GOOGLE, AccountType.PHONE): "Successfully linked Google Account and Phone Number.",
    (AccountType.PHONE, AccountType.GOOGLE): "Successfully linked Phone Number and Google Account.",
    (AccountType.GUEST, AccountType.GOOGLE): "Successfully linked Guest Account and Google Account.",
    (AccountType.GUEST, AccountType.PHONE): "Successfully linked Guest Account and Phone Number.",
}


@router.post("/out")
def sign_out(
    payload: dict = Body(default={}),
    gate: ValidationGate = Depends(get_gate),
):
    def handler(user, _, envelope):
        # Built first: a guest account may not survive signing out
        body_user = envelope.user_envelope(user)
        gate.identity.sign_out(user, envelope.account_type, gate.token)
        return envelope.success({"user": body_user, "message": "Successfully logged out of account."})

    return gate.execute(payload, None, handler)


@router.post("/link")
def link(
    payload: dict = Body(default={}),
    gate: ValidationGate = Depends(get_gate),
):
    account_type = gate.envelope.account_type

    def handler(user, params, envelope):
        result = gate.identity.link(user, params)
        linked = result.user
        fields = present(name=linked.name, email=linked.email, photo=linked.photo, phone=linked.phone)
        return envelope.success(
            {
                "user": envelope.user_envelope(linked, fields),
                "message": LINK_MESSAGES[(account_type, result.linked)],
            }
        )

    return gate.execute(payload, link_rules(account_type, payload), handler)


@router.put("/update")
def update(
    payload: dict = Body(default={}),
    gate: ValidationGate = Depends(get_gate),
):
    def handler(user, params, envelope):
        updated = gate.identity.update_profile(user, envelope.account_type, params)
        return envelope.success(
            {
                "user": envelope.user_envelope(updated, present(name=updated.name, phone=updated.phone)),
                "message": "Account was updated successfully.",
            }
        )

    return gate.execute(payload, update_rules(gate.envelope.account_type), handler)


@router.delete("/delete")
def delete(
    payload: dict = Body(default={}),
    gate: ValidationGate = Depends(get_gate),
):
    def handler(user, _, envelope):
        body_user = envelope.user_envelope(user)
        gate.identity.delete_account(user, envelope.account_type, gate.token)
        return envelope.success({"user": body_user, "message": "Account was deleted successfully."})

    return gate.execute(payload, None, handler)
