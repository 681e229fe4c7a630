"""
Tests for POST /api/auth/* — sign in, refresh, recover, verify.
"""

from datetime import timedelta

import pytest

from storefront.domain.models.user import User
from storefront.domain.models.verification import VerificationCode
from storefront.infrastructure.database import utcnow
from tests.conftest import make_user, sign_in_guest, sign_in_phone


class TestAccountType:
    @pytest.mark.parametrize("account_type", [None, "", "facebook", "admin"])
    def test_unrecognised_type_is_rejected(self, client, account_type) -> None:
        headers = {"x-account-type": account_type} if account_type is not None else {}
        response = client.post("/api/auth/in", headers=headers, json={"guest": 1, "phone": "1"})
        assert response.status_code == 422
        assert response.json()["body"]["error"] == "MISSING_OR_INVALID_FIELDS"


class TestGuestSignIn:
    def test_fresh_guest_then_duplicate(self, client) -> None:
        response = client.post("/api/auth/in", headers={"x-account-type": "guest"}, json={"guest": 12345})
        assert response.status_code == 200
        payload = response.json()
        assert payload["success"] is True
        user = payload["body"]["user"]
        assert isinstance(user["x-account-id"], int)
        assert user["x-account-type"] == "guest"
        assert user["guest"] == 12345
        assert user["o-auth-token"].startswith("Bearer ")
        assert user["o-auth-expires"] > 0

        again = client.post("/api/auth/in", headers={"x-account-type": "guest"}, json={"guest": 12345})
        assert again.status_code == 409
        assert again.json()["body"]["error"] == "ACCOUNT_ALREADY_EXISTS"

    def test_guest_id_beyond_storage_range(self, client) -> None:
        response = client.post("/api/auth/in", headers={"x-account-type": "guest"}, json={"guest": 10**20})
        assert response.status_code == 422
        body = response.json()["body"]
        assert body["error"] == "MISSING_OR_INVALID_FIELDS"
        assert "guest" in body["errors"]

        largest = client.post("/api/auth/in", headers={"x-account-type": "guest"}, json={"guest": 2**63 - 1})
        assert largest.status_code == 200

    def test_missing_guest_field(self, client) -> None:
        response = client.post("/api/auth/in", headers={"x-account-type": "guest"}, json={})
        body = response.json()["body"]
        assert response.status_code == 422
        assert "guest" in body["errors"]

    def test_soft_deleted_guest_still_counts(self, client, db_session) -> None:
        make_user(db_session, guest=777, deleted_at=utcnow())
        response = client.post("/api/auth/in", headers={"x-account-type": "guest"}, json={"guest": 777})
        assert response.status_code == 409


class TestPhoneSignIn:
    def test_code_is_single_use(self, client, sms) -> None:
        client.post("/api/auth/verify", json={"phone": "9876543210"})
        code = int(sms.last_code("9876543210"))
        request = {"phone": "9876543210", "x-verification-code": code}

        first = client.post("/api/auth/in", headers={"x-account-type": "phone"}, json=request)
        assert first.status_code == 200
        user = first.json()["body"]["user"]
        assert user["phone"] == "9876543210"
        assert user["o-auth-token"].startswith("Bearer ")

        second = client.post("/api/auth/in", headers={"x-account-type": "phone"}, json=request)
        assert second.status_code == 401
        assert second.json()["body"]["error"] == "AUTHENTICATION_FAILED"

    def test_wrong_code(self, client, sms) -> None:
        client.post("/api/auth/verify", json={"phone": "9876543210"})
        code = (int(sms.last_code("9876543210")) + 1) % 10000
        response = client.post(
            "/api/auth/in",
            headers={"x-account-type": "phone"},
            json={"phone": "9876543210", "x-verification-code": code},
        )
        assert response.status_code == 401

    def test_only_newest_code_is_valid(self, client, db_session) -> None:
        db_session.add_all(
            [
                VerificationCode(
                    phone="9876543210", code="1111", status="ACTIVE", created_at=utcnow() - timedelta(seconds=30)
                ),
                VerificationCode(phone="9876543210", code="2222", status="ACTIVE", created_at=utcnow()),
            ]
        )
        db_session.commit()

        stale = client.post(
            "/api/auth/in",
            headers={"x-account-type": "phone"},
            json={"phone": "9876543210", "x-verification-code": 1111},
        )
        assert stale.status_code == 401

        fresh = client.post(
            "/api/auth/in",
            headers={"x-account-type": "phone"},
            json={"phone": "9876543210", "x-verification-code": 2222},
        )
        assert fresh.status_code == 200

    def test_expired_code_is_rejected(self, client, db_session) -> None:
        db_session.add(
            VerificationCode(phone="9876543210", code="0042", status="ACTIVE", created_at=utcnow().replace(year=2000))
        )
        db_session.commit()
        response = client.post(
            "/api/auth/in",
            headers={"x-account-type": "phone"},
            json={"phone": "9876543210", "x-verification-code": 42},
        )
        assert response.status_code == 401

    def test_phone_number_sent_as_number(self, client, sms) -> None:
        client.post("/api/auth/verify", json={"phone": 9876543210})
        response = client.post(
            "/api/auth/in",
            headers={"x-account-type": "phone"},
            json={"phone": 9876543210, "x-verification-code": int(sms.last_code("9876543210"))},
        )
        assert response.status_code == 200


class TestGoogleSignIn:
    def test_creates_account(self, client, google, db_session) -> None:
        google.register("good-token", "asha@example.com", picture="https://img/asha.png")
        response = client.post(
            "/api/auth/in", headers={"x-account-type": "google", "o-auth-token": "good-token"}
        )
        assert response.status_code == 200
        user = response.json()["body"]["user"]
        assert user["email"] == "asha@example.com"
        assert user["auth"] is True
        assert "o-auth-token" not in user
        assert db_session.query(User).filter(User.email == "asha@example.com").count() == 1

    def test_invalid_token(self, client) -> None:
        response = client.post("/api/auth/in", headers={"x-account-type": "google", "o-auth-token": "nope"})
        assert response.status_code == 401
        assert response.json()["body"]["error"] == "INVALID_AUTH_TOKEN"

    def test_missing_token(self, client) -> None:
        response = client.post("/api/auth/in", headers={"x-account-type": "google"})
        assert response.status_code == 422

    def test_role_is_required(self, client, google, db_session) -> None:
        make_user(db_session, email="staff@example.com", role="staff")
        google.register("staff-token", "staff@example.com")
        response = client.post(
            "/api/auth/in", headers={"x-account-type": "google", "o-auth-token": "staff-token"}
        )
        assert response.status_code == 403
        assert response.json()["body"]["error"] == "MISSING_REQUIRED_PERMISSIONS"


class TestDeletedAccounts:
    def test_sign_in_exposes_snapshot_and_recovery_runs_once(self, client, google, db_session) -> None:
        make_user(
            db_session,
            name="Asha",
            email="asha@example.com",
            google="sub-1",
            status="INACTIVE",
            deleted_at=utcnow(),
        )
        google.register("good-token", "asha@example.com")

        response = client.post(
            "/api/auth/in", headers={"x-account-type": "google", "o-auth-token": "good-token"}
        )
        assert response.status_code == 410
        body = response.json()["body"]
        assert body["error"] == "ACCOUNT_WAS_DELETED"
        assert body["user"] == {"email": "asha@example.com", "name": "Asha"}

        recovered = client.post(
            "/api/auth/recover",
            headers={"x-account-type": "google"},
            json={"o-auth-token": "good-token"},
        )
        assert recovered.status_code == 200
        assert recovered.json()["body"]["message"] == "Account was recovered successfully."

        again = client.post(
            "/api/auth/recover",
            headers={"x-account-type": "google"},
            json={"o-auth-token": "good-token"},
        )
        assert again.status_code == 409

    def test_phone_recovery_issues_token(self, client, db_session) -> None:
        make_user(db_session, phone="9000000001", deleted_at=utcnow())
        response = client.post(
            "/api/auth/recover", headers={"x-account-type": "phone"}, json={"phone": "9000000001"}
        )
        assert response.status_code == 200
        assert response.json()["body"]["user"]["o-auth-token"].startswith("Bearer ")

    def test_recover_unknown_account(self, client) -> None:
        response = client.post(
            "/api/auth/recover", headers={"x-account-type": "phone"}, json={"phone": "9000000002"}
        )
        assert response.status_code == 404

    def test_guest_cannot_recover(self, client) -> None:
        response = client.post("/api/auth/recover", headers={"x-account-type": "guest"}, json={"guest": 1})
        assert response.status_code == 422

    def test_verify_rejects_deleted_phone(self, client, db_session, sms) -> None:
        make_user(db_session, phone="9000000003", deleted_at=utcnow())
        response = client.post("/api/auth/verify", json={"phone": "9000000003"})
        assert response.status_code == 410
        assert sms.sent == []


class TestRefresh:
    def test_guest_refresh(self, client) -> None:
        response = client.post("/api/auth/in", headers={"x-account-type": "guest"}, json={"guest": 55})
        account_id = response.json()["body"]["user"]["x-account-id"]

        refreshed = client.post(
            "/api/auth/refresh",
            headers={"x-account-type": "guest"},
            json={"x-account-id": account_id, "guest": 55},
        )
        assert refreshed.status_code == 200
        assert refreshed.json()["body"]["user"]["o-auth-token"].startswith("Bearer ")

    def test_account_id_from_header(self, client) -> None:
        response = client.post("/api/auth/in", headers={"x-account-type": "guest"}, json={"guest": 56})
        account_id = response.json()["body"]["user"]["x-account-id"]

        refreshed = client.post(
            "/api/auth/refresh",
            headers={"x-account-type": "guest", "x-account-id": str(account_id)},
            json={"guest": 56},
        )
        assert refreshed.status_code == 200

    def test_mismatched_pair(self, client, sms) -> None:
        sign_in_phone(client, sms, phone="9111111111")
        refreshed = client.post(
            "/api/auth/refresh",
            headers={"x-account-type": "phone"},
            json={"x-account-id": 999, "phone": "9111111111"},
        )
        assert refreshed.status_code == 404
        assert refreshed.json()["body"]["error"] == "ACCOUNT_NOT_FOUND"

    def test_google_cannot_refresh(self, client) -> None:
        response = client.post("/api/auth/refresh", headers={"x-account-type": "google"}, json={})
        assert response.status_code == 422


class TestVerify:
    def test_dispatches_code(self, client, sms, db_session) -> None:
        response = client.post("/api/auth/verify", json={"phone": "9222222222"})
        assert response.status_code == 200
        body = response.json()["body"]
        assert body["message"] == "Successfully sent OTP."
        assert body["user"]["phone"] == "9222222222"
        assert body["response"]["return"] is True
        assert body["expires"] > 0

        phone, code = sms.sent[-1]
        assert phone == "9222222222"
        assert len(code) == 4 and code.isdigit()
        assert db_session.query(User).filter(User.phone == "9222222222").count() == 0

    def test_invalid_phone(self, client) -> None:
        response = client.post("/api/auth/verify", json={"phone": "not-a-number"})
        assert response.status_code == 422
        assert "phone" in response.json()["body"]["errors"]


class TestSessionTokens:
    def test_token_of_another_channel_is_rejected(self, client) -> None:
        headers = sign_in_guest(client, guest=1)
        headers["x-account-type"] = "phone"
        response = client.get("/api/address/list", headers=headers)
        assert response.status_code == 401
        assert response.json()["body"]["error"] == "INVALID_AUTH_TOKEN"

    def test_garbage_token(self, client) -> None:
        response = client.get(
            "/api/address/list", headers={"x-account-type": "guest", "o-auth-token": "Bearer garbage"}
        )
        assert response.status_code == 401
