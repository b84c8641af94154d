"""Repository adapters - Database implementations."""

from .sqlite import SqliteAccountRepository, SqliteOtpRepository
from .store import SqliteStore, run_migrations

__all__ = ["SqliteAccountRepository", "SqliteOtpRepository", "SqliteStore", "run_migrations"]
