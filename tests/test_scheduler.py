"""
Tests for the one-minute cleanup sweep.
"""

from datetime import timedelta

from storefront.application.services.token_service import invalidate_session_token, issue_session_token
from storefront.domain.enums import AccountType
from storefront.domain.models.revoked_token import RevokedToken
from storefront.domain.models.user import User
from storefront.domain.models.verification import VerificationCode
from storefront.infrastructure.database import utcnow
from storefront.scheduler.jobs import sweep
from tests.conftest import make_user


def add_code(db, status: str, age: timedelta) -> VerificationCode:
    code = VerificationCode(phone="9876543210", code="1234", status=status, created_at=utcnow() - age)
    db.add(code)
    db.commit()
    return code


class TestSweep:
    def test_young_active_code_survives(self, db_session) -> None:
        code = add_code(db_session, "ACTIVE", timedelta(seconds=30))
        result = sweep(db_session)
        assert result["expired_codes"] == 0

        db_session.expire_all()
        assert db_session.get(VerificationCode, code.id).status == "ACTIVE"

    def test_old_active_code_expires_then_is_deleted(self, db_session) -> None:
        code = add_code(db_session, "ACTIVE", timedelta(minutes=3))
        code_id = code.id
        now = utcnow()

        result = sweep(db_session, now=now)
        assert result["expired_codes"] == 1
        # Deactivated and already past the threshold, so the same pass deletes it
        assert result["deleted_codes"] == 1

        db_session.expire_all()
        assert db_session.get(VerificationCode, code_id) is None

    def test_young_inactive_code_is_kept(self, db_session) -> None:
        code = add_code(db_session, "INACTIVE", timedelta(seconds=10))
        assert sweep(db_session)["deleted_codes"] == 0
        db_session.expire_all()
        assert db_session.get(VerificationCode, code.id) is not None

    def test_deleted_guests_are_purged(self, db_session) -> None:
        make_user(db_session, guest=1, deleted_at=utcnow())
        make_user(db_session, guest=2)
        make_user(db_session, guest=3, phone="9000000000", deleted_at=utcnow())

        assert sweep(db_session)["purged_guests"] == 1
        remaining = sorted(user.guest for user in db_session.query(User))
        assert remaining == [2, 3]

    def test_expired_revocations_are_purged(self, db_session) -> None:
        user = make_user(db_session, guest=9)
        live = issue_session_token(user, AccountType.GUEST)
        stale = issue_session_token(user, AccountType.GUEST, expires_delta=timedelta(seconds=-5))
        assert invalidate_session_token(db_session, live.token)
        db_session.add(RevokedToken(jti="stale", expires_at=stale.expires_at.replace(tzinfo=None)))
        db_session.commit()

        assert sweep(db_session)["purged_revocations"] == 1
        assert db_session.query(RevokedToken).count() == 1
