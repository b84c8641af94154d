"""
SQLite repository adapters - Implement AccountRepository and OtpRepository.

Both repositories share one SqliteStore, so multi-table operations
(promote_pending, reset_password, replace_code) run inside a single store
transaction and reach disk in a single flush.

Consumption of a code is always a guarded update
(``SET used = 1 WHERE id = ? AND used = 0``): of two requests racing on
the same code, exactly one sees a changed row.
"""

from typing import Any

from src.domain.entities import AccountStats, OtpCode, PendingUser, User
from src.domain.exceptions import CodeNotFound
from src.domain.ports import OtpPurpose

from .store import SqliteStore

_USER_COLUMNS = "id, full_name, email, phone, password_hash, photo, verified, created_at"
_PENDING_COLUMNS = "email, full_name, phone, password_hash, photo, created_at"
_OTP_COLUMNS = "id, email, code, type, expires_at, used"

_CONSUME_CODE_SQL = "UPDATE otp_codes SET used = 1 WHERE id = ? AND used = 0"


def _to_user(row: dict[str, Any]) -> User:
    return User(
        id=row["id"],
        full_name=row["full_name"],
        email=row["email"],
        phone=row["phone"],
        password_hash=row["password_hash"],
        photo=row["photo"],
        verified=bool(row["verified"]),
        created_at=row["created_at"],
    )


def _to_pending(row: dict[str, Any]) -> PendingUser:
    return PendingUser(**row)


def _to_otp(row: dict[str, Any]) -> OtpCode:
    return OtpCode(
        id=row["id"],
        email=row["email"],
        code=row["code"],
        purpose=OtpPurpose(row["type"]),
        expires_at=row["expires_at"],
        used=bool(row["used"]),
    )


class SqliteAccountRepository:
    """
    Implements AccountRepository protocol over SqliteStore.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, store: SqliteStore) -> None:
        self._store = store

    def get_user(self, email: str) -> User | None:
        row = self._store.get(f"SELECT {_USER_COLUMNS} FROM users WHERE email = ?", (email,))
        return _to_user(row) if row is not None else None

    def get_verified_user(self, email: str) -> User | None:
        row = self._store.get(
            f"SELECT {_USER_COLUMNS} FROM users WHERE email = ? AND verified = 1", (email,)
        )
        return _to_user(row) if row is not None else None

    def get_pending(self, email: str) -> PendingUser | None:
        row = self._store.get(
            f"SELECT {_PENDING_COLUMNS} FROM pending_users WHERE email = ?", (email,)
        )
        return _to_pending(row) if row is not None else None

    def upsert_pending(
        self,
        email: str,
        full_name: str,
        phone: str,
        password_hash: str,
        photo: str | None,
    ) -> None:
        """Stage a registration; an existing row for the email is overwritten."""
        self._store.upsert(
            "pending_users",
            "email",
            {
                "email": email,
                "full_name": full_name,
                "phone": phone,
                "password_hash": password_hash,
                "photo": photo,
            },
        )

    def promote_pending(self, email: str, otp_id: int) -> User | None:
        """
        Consume the register code, upsert the verified user, drop the pending row.

        All in one transaction. Returns None without mutating anything when
        there is no pending registration.
        """
        with self._store.transaction():
            pending = self.get_pending(email)
            if pending is None:
                return None

            if self._store.run(_CONSUME_CODE_SQL, (otp_id,)) != 1:
                raise CodeNotFound()

            self._store.upsert(
                "users",
                "email",
                {
                    "email": pending.email,
                    "full_name": pending.full_name,
                    "phone": pending.phone,
                    "password_hash": pending.password_hash,
                    "photo": pending.photo,
                    "verified": 1,
                },
            )
            self._store.run("DELETE FROM pending_users WHERE email = ?", (email,))
            return self.get_user(email)

    def reset_password(self, email: str, otp_id: int, password_hash: str) -> None:
        """Consume the forgot code and replace the password hash in one transaction."""
        with self._store.transaction():
            if self._store.run(_CONSUME_CODE_SQL, (otp_id,)) != 1:
                raise CodeNotFound()
            self._store.run(
                "UPDATE users SET password_hash = ? WHERE email = ?", (password_hash, email)
            )

    def list_verified_users(self) -> list[User]:
        rows = self._store.all(
            f"SELECT {_USER_COLUMNS} FROM users WHERE verified = 1 ORDER BY id DESC"
        )
        return [_to_user(row) for row in rows]

    def stats(self, now_ms: int) -> AccountStats:
        def count(sql: str, params: tuple = ()) -> int:
            row = self._store.get(sql, params)
            return row["c"] if row is not None else 0

        return AccountStats(
            total_verified_users=count("SELECT COUNT(*) AS c FROM users WHERE verified = 1"),
            pending_registrations=count("SELECT COUNT(*) AS c FROM pending_users"),
            active_otp_codes=count(
                "SELECT COUNT(*) AS c FROM otp_codes WHERE used = 0 AND expires_at > ?",
                (now_ms,),
            ),
            registered_today=count(
                "SELECT COUNT(*) AS c FROM users "
                "WHERE verified = 1 AND date(created_at) = date('now')"
            ),
        )


class SqliteOtpRepository:
    """
    Implements OtpRepository protocol over SqliteStore.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Used rows are kept as history; only unused rows are superseded.
    """

    def __init__(self, store: SqliteStore) -> None:
        self._store = store

    def replace_code(self, email: str, purpose: OtpPurpose, code: str, expires_at: int) -> None:
        with self._store.transaction():
            self._store.run(
                "DELETE FROM otp_codes WHERE email = ? AND type = ? AND used = 0",
                (email, purpose.value),
            )
            self._store.run(
                "INSERT INTO otp_codes (email, code, type, expires_at, used) "
                "VALUES (?, ?, ?, ?, 0)",
                (email, code, purpose.value, expires_at),
            )

    def latest_unused(self, email: str, purpose: OtpPurpose) -> OtpCode | None:
        row = self._store.get(
            f"SELECT {_OTP_COLUMNS} FROM otp_codes "
            "WHERE email = ? AND type = ? AND used = 0 "
            "ORDER BY id DESC LIMIT 1",
            (email, purpose.value),
        )
        return _to_otp(row) if row is not None else None

    def mark_used(self, otp_id: int) -> bool:
        return self._store.run(_CONSUME_CODE_SQL, (otp_id,)) == 1
