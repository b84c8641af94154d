"""
Admin domain service - Read-only views over the account store.

Access control (the shared admin key) is enforced at the API boundary;
this service only reads.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass, field

from .entities import AccountStats, User
from .ports import AccountRepository


@dataclass
class AdminService:
    """Listing and aggregate counts for operators."""

    accounts: AccountRepository
    clock: Callable[[], int] = field(default=lambda: int(time.time() * 1000))

    def list_users(self) -> list[User]:
        """Verified users, highest identity first."""
        return self.accounts.list_verified_users()

    def stats(self) -> AccountStats:
        """Counts of verified users, pending registrations, live codes and today's signups."""
        return self.accounts.stats(self.clock())
