"""
Integration tests for the SQLite repository adapters.

Tests run against a real file-backed store to verify:
- Pending registrations overwrite by email
- promote_pending is atomic and mutation-free when nothing is pending
- replace_code supersedes only unused codes for the same (email, purpose)
- Guarded consumption succeeds exactly once
- Admin listing order and stats
"""

from pathlib import Path

import pytest

from src.adapters.repository.sqlite import SqliteAccountRepository, SqliteOtpRepository
from src.adapters.repository.store import SqliteStore
from src.domain.exceptions import CodeNotFound
from src.domain.ports import OtpPurpose

FAR_FUTURE = 4_000_000_000_000


def stage(accounts: SqliteAccountRepository, email: str = "a@b.com", **overrides) -> None:
    values = {
        "full_name": "Alice",
        "phone": "555-0100",
        "password_hash": "$2b$04$pending",
        "photo": None,
    }
    values.update(overrides)
    accounts.upsert_pending(email=email, **values)


def issue(
    otp_repository: SqliteOtpRepository,
    email: str = "a@b.com",
    purpose: OtpPurpose = OtpPurpose.REGISTER,
    code: str = "123456",
) -> int:
    otp_repository.replace_code(email, purpose, code, FAR_FUTURE)
    return otp_repository.latest_unused(email, purpose).id


def register(
    accounts: SqliteAccountRepository,
    otp_repository: SqliteOtpRepository,
    email: str = "a@b.com",
    **overrides,
) -> None:
    stage(accounts, email, **overrides)
    accounts.promote_pending(email, issue(otp_repository, email))


class TestPendingRegistrations:
    """Tests for upsert_pending/get_pending."""

    def test_stage_and_read_back(self, accounts: SqliteAccountRepository) -> None:
        stage(accounts, photo="me.png")

        pending = accounts.get_pending("a@b.com")

        assert pending is not None
        assert pending.full_name == "Alice"
        assert pending.photo == "me.png"
        assert pending.created_at

    def test_get_pending_absent(self, accounts: SqliteAccountRepository) -> None:
        assert accounts.get_pending("nobody@b.com") is None

    def test_restaging_overwrites(self, accounts: SqliteAccountRepository, store: SqliteStore) -> None:
        stage(accounts, full_name="Alice", password_hash="h1")
        stage(accounts, full_name="Alicia", password_hash="h2")

        pending = accounts.get_pending("a@b.com")

        assert pending.full_name == "Alicia"
        assert pending.password_hash == "h2"
        assert store.get("SELECT COUNT(*) AS c FROM pending_users") == {"c": 1}


class TestPromotePending:
    """Tests for promote_pending (finalize registration)."""

    def test_promotes_and_consumes(
        self,
        accounts: SqliteAccountRepository,
        otp_repository: SqliteOtpRepository,
    ) -> None:
        stage(accounts, photo="me.png")
        otp_id = issue(otp_repository)

        user = accounts.promote_pending("a@b.com", otp_id)

        assert user is not None
        assert user.verified is True
        assert user.full_name == "Alice"
        assert user.photo == "me.png"
        assert user.password_hash == "$2b$04$pending"
        assert accounts.get_pending("a@b.com") is None
        assert otp_repository.latest_unused("a@b.com", OtpPurpose.REGISTER) is None

    def test_no_pending_row_mutates_nothing(
        self,
        accounts: SqliteAccountRepository,
        otp_repository: SqliteOtpRepository,
    ) -> None:
        otp_id = issue(otp_repository)

        assert accounts.promote_pending("a@b.com", otp_id) is None
        # Code stays live
        assert otp_repository.latest_unused("a@b.com", OtpPurpose.REGISTER).id == otp_id
        assert accounts.get_user("a@b.com") is None

    def test_already_consumed_code_rolls_back(
        self,
        accounts: SqliteAccountRepository,
        otp_repository: SqliteOtpRepository,
    ) -> None:
        stage(accounts)
        otp_id = issue(otp_repository)
        assert otp_repository.mark_used(otp_id) is True

        with pytest.raises(CodeNotFound):
            accounts.promote_pending("a@b.com", otp_id)

        assert accounts.get_pending("a@b.com") is not None
        assert accounts.get_user("a@b.com") is None

    def test_replaces_existing_user_row(
        self,
        accounts: SqliteAccountRepository,
        otp_repository: SqliteOtpRepository,
        store: SqliteStore,
    ) -> None:
        register(accounts, otp_repository, full_name="Alice", password_hash="h1")
        first_id = accounts.get_user("a@b.com").id

        register(accounts, otp_repository, full_name="Alicia", password_hash="h2")

        user = accounts.get_user("a@b.com")
        assert user.id == first_id
        assert user.full_name == "Alicia"
        assert user.password_hash == "h2"
        assert store.get("SELECT COUNT(*) AS c FROM users") == {"c": 1}

    def test_promotion_survives_reload(
        self,
        accounts: SqliteAccountRepository,
        otp_repository: SqliteOtpRepository,
        db_path: Path,
    ) -> None:
        register(accounts, otp_repository)

        reopened = SqliteStore(db_path)
        reopened.open()
        try:
            user = SqliteAccountRepository(reopened).get_verified_user("a@b.com")
        finally:
            reopened.close()

        assert user is not None
        assert user.verified is True


class TestUserLookups:
    """Tests for get_user/get_verified_user/reset_password."""

    def test_get_verified_user_ignores_unverified_rows(
        self, accounts: SqliteAccountRepository, store: SqliteStore
    ) -> None:
        store.run(
            "INSERT INTO users (full_name, email, phone, password_hash, verified) "
            "VALUES (?, ?, ?, ?, 0)",
            ("A", "a@b.com", "555", "hash"),
        )

        assert accounts.get_user("a@b.com") is not None
        assert accounts.get_verified_user("a@b.com") is None

    def test_reset_password_consumes_and_updates(
        self,
        accounts: SqliteAccountRepository,
        otp_repository: SqliteOtpRepository,
    ) -> None:
        register(accounts, otp_repository, password_hash="old")
        otp_id = issue(otp_repository, purpose=OtpPurpose.FORGOT, code="654321")

        accounts.reset_password("a@b.com", otp_id, "new")

        assert accounts.get_user("a@b.com").password_hash == "new"
        assert otp_repository.latest_unused("a@b.com", OtpPurpose.FORGOT) is None

    def test_reset_password_with_consumed_code_keeps_old_hash(
        self,
        accounts: SqliteAccountRepository,
        otp_repository: SqliteOtpRepository,
    ) -> None:
        register(accounts, otp_repository, password_hash="old")
        otp_id = issue(otp_repository, purpose=OtpPurpose.FORGOT)
        otp_repository.mark_used(otp_id)

        with pytest.raises(CodeNotFound):
            accounts.reset_password("a@b.com", otp_id, "new")

        assert accounts.get_user("a@b.com").password_hash == "old"


class TestOtpCodes:
    """Tests for replace_code/latest_unused/mark_used."""

    def test_latest_unused_round_trip(self, otp_repository: SqliteOtpRepository) -> None:
        otp_repository.replace_code("a@b.com", OtpPurpose.REGISTER, "012345", FAR_FUTURE)

        otp = otp_repository.latest_unused("a@b.com", OtpPurpose.REGISTER)

        assert otp.code == "012345"
        assert otp.purpose is OtpPurpose.REGISTER
        assert otp.expires_at == FAR_FUTURE
        assert otp.used is False

    def test_replace_supersedes_unused_code(
        self, otp_repository: SqliteOtpRepository, store: SqliteStore
    ) -> None:
        issue(otp_repository, code="111111")
        issue(otp_repository, code="222222")

        assert otp_repository.latest_unused("a@b.com", OtpPurpose.REGISTER).code == "222222"
        rows = store.all("SELECT code FROM otp_codes WHERE email = ? AND used = 0", ("a@b.com",))
        assert rows == [{"code": "222222"}]

    def test_replace_keeps_used_history(
        self, otp_repository: SqliteOtpRepository, store: SqliteStore
    ) -> None:
        first = issue(otp_repository, code="111111")
        otp_repository.mark_used(first)

        issue(otp_repository, code="222222")

        rows = store.all("SELECT code, used FROM otp_codes ORDER BY id")
        assert rows == [{"code": "111111", "used": 1}, {"code": "222222", "used": 0}]

    def test_purposes_are_independent(self, otp_repository: SqliteOtpRepository) -> None:
        issue(otp_repository, purpose=OtpPurpose.REGISTER, code="111111")
        issue(otp_repository, purpose=OtpPurpose.FORGOT, code="222222")

        assert otp_repository.latest_unused("a@b.com", OtpPurpose.REGISTER).code == "111111"
        assert otp_repository.latest_unused("a@b.com", OtpPurpose.FORGOT).code == "222222"

    def test_emails_are_independent(self, otp_repository: SqliteOtpRepository) -> None:
        issue(otp_repository, email="a@b.com", code="111111")
        issue(otp_repository, email="c@d.com", code="222222")

        assert otp_repository.latest_unused("a@b.com", OtpPurpose.REGISTER).code == "111111"

    def test_mark_used_succeeds_once(self, otp_repository: SqliteOtpRepository) -> None:
        otp_id = issue(otp_repository)

        assert otp_repository.mark_used(otp_id) is True
        assert otp_repository.mark_used(otp_id) is False
        assert otp_repository.latest_unused("a@b.com", OtpPurpose.REGISTER) is None

    def test_mark_used_unknown_id(self, otp_repository: SqliteOtpRepository) -> None:
        assert otp_repository.mark_used(9999) is False


class TestAdminViews:
    """Tests for list_verified_users/stats."""

    def test_list_newest_first(
        self,
        accounts: SqliteAccountRepository,
        otp_repository: SqliteOtpRepository,
    ) -> None:
        for email in ("one@b.com", "two@b.com", "three@b.com"):
            register(accounts, otp_repository, email=email)

        emails = [user.email for user in accounts.list_verified_users()]

        assert emails == ["three@b.com", "two@b.com", "one@b.com"]

    def test_list_empty(self, accounts: SqliteAccountRepository) -> None:
        assert accounts.list_verified_users() == []

    def test_stats_counts(
        self,
        accounts: SqliteAccountRepository,
        otp_repository: SqliteOtpRepository,
    ) -> None:
        register(accounts, otp_repository, email="one@b.com")
        register(accounts, otp_repository, email="two@b.com")
        stage(accounts, email="pending@b.com")
        issue(otp_repository, email="pending@b.com")
        otp_repository.replace_code("stale@b.com", OtpPurpose.FORGOT, "000000", 1_000)

        stats = accounts.stats(now_ms=2_000)

        assert stats.total_verified_users == 2
        assert stats.pending_registrations == 1
        # Only the unexpired unused code counts; consumed and stale ones don't
        assert stats.active_otp_codes == 1
        assert stats.registered_today == 2
