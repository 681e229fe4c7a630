"""
Tests for /api/address/* — postcode lookup and the address book.
"""

from storefront.domain.models.address import Address
from tests.conftest import make_postcode, sign_in_guest


def address_payload(postcode_id: int, name: str = "Home", **fields) -> dict:
    payload = {
        "postcode_id": postcode_id,
        "name": name,
        "care_of": "Asha",
        "phone": "9876543210",
        "line_1": "12 MG Road",
        "line_2": "Near the park",
    }
    payload.update(fields)
    return payload


def add(client, headers, payload) -> int:
    response = client.post("/api/address/add", headers=headers, json=payload)
    assert response.status_code == 200, response.text
    return response.json()["body"]["item"]["id"]


class TestPostcode:
    def test_lookup(self, client, db_session) -> None:
        make_postcode(db_session, code="560001")
        headers = sign_in_guest(client)
        response = client.post("/api/address/postcode", headers=headers, json={"postcode": "560001"})
        assert response.status_code == 200
        item = response.json()["body"]["item"]
        assert item["city"] == "Bengaluru"
        assert "created_at" not in item

    def test_unknown(self, client) -> None:
        headers = sign_in_guest(client)
        response = client.post("/api/address/postcode", headers=headers, json={"postcode": "000000"})
        assert response.status_code == 404
        assert response.json()["body"]["error"] == "ITEM_NOT_FOUND"


class TestAddressBook:
    def test_first_address_is_default(self, client, db_session) -> None:
        postcode = make_postcode(db_session)
        headers = sign_in_guest(client)

        response = client.post("/api/address/add", headers=headers, json=address_payload(postcode.id))
        assert response.status_code == 200
        item = response.json()["body"]["item"]
        assert item["default"] is True
        assert item["type"] == "HOME"
        assert item["postcode"]["code"] == "560001"
        assert "user_id" not in item and "postcode_id" not in item

        second = add(client, headers, address_payload(postcode.id, name="Office", type="OFFICE"))
        db_session.expire_all()
        assert db_session.get(Address, second).default is False

    def test_unknown_postcode(self, client) -> None:
        headers = sign_in_guest(client)
        response = client.post("/api/address/add", headers=headers, json=address_payload(999))
        assert response.status_code == 404

    def test_missing_fields(self, client) -> None:
        headers = sign_in_guest(client)
        response = client.post("/api/address/add", headers=headers, json={"name": "Home"})
        assert response.status_code == 422
        errors = response.json()["body"]["errors"]
        assert {"postcode_id", "care_of", "line_1"} <= set(errors)

    def test_exactly_one_default(self, client, db_session) -> None:
        postcode = make_postcode(db_session)
        headers = sign_in_guest(client)
        ids = [add(client, headers, address_payload(postcode.id, name=f"Address {n}")) for n in range(4)]

        for chosen in ids:
            response = client.put("/api/address/update", headers=headers, json={"id": chosen, "default": True})
            assert response.status_code == 200
            db_session.expire_all()
            defaults = [a.id for a in db_session.query(Address).filter(Address.default.is_(True))]
            assert defaults == [chosen]

    def test_update_fields(self, client, db_session) -> None:
        postcode = make_postcode(db_session)
        headers = sign_in_guest(client)
        address_id = add(client, headers, address_payload(postcode.id))

        response = client.put(
            "/api/address/update", headers=headers, json={"id": address_id, "line_1": "1 Brigade Road"}
        )
        assert response.status_code == 200
        assert response.json()["body"]["message"] == "Address updated successfully."

        shown = client.post("/api/address/show", headers=headers, json={"id": address_id})
        assert shown.json()["body"]["item"]["line_1"] == "1 Brigade Road"

    def test_other_users_address_is_invisible(self, client, db_session) -> None:
        postcode = make_postcode(db_session)
        owner = sign_in_guest(client, guest=1)
        intruder = sign_in_guest(client, guest=2)
        address_id = add(client, owner, address_payload(postcode.id))

        assert client.post("/api/address/show", headers=intruder, json={"id": address_id}).status_code == 404
        assert (
            client.put("/api/address/update", headers=intruder, json={"id": address_id, "name": "x"}).status_code
            == 404
        )
        assert client.request("DELETE", "/api/address/delete", headers=intruder, json={"id": address_id}).status_code == 404

        removed = client.request("DELETE", "/api/address/delete", headers=owner, json={"id": address_id})
        assert removed.status_code == 200
        assert removed.json()["body"]["message"] == "Address removed successfully."

    def test_list_and_search(self, client, db_session) -> None:
        postcode = make_postcode(db_session)
        headers = sign_in_guest(client)
        for name in ("Home", "Office", "Parents"):
            add(client, headers, address_payload(postcode.id, name=name))

        listed = client.get("/api/address/list?order=dsc&limit=2", headers=headers)
        assert listed.status_code == 200
        body = listed.json()["body"]
        assert [item["name"] for item in body["items"]] == ["Parents", "Office"]
        assert "page=2" in body["next_page"]

        found = client.get("/api/address/search?query=Off", headers=headers)
        assert [item["name"] for item in found.json()["body"]["items"]] == ["Office"]
        assert "next_page" not in found.json()["body"]

    def test_search_requires_query(self, client) -> None:
        headers = sign_in_guest(client)
        response = client.get("/api/address/search", headers=headers)
        assert response.status_code == 422

    def test_invalid_order(self, client) -> None:
        headers = sign_in_guest(client)
        response = client.get("/api/address/list?order=sideways", headers=headers)
        assert response.status_code == 422
        assert "order" in response.json()["body"]["errors"]
