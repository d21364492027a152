"""One-way password hashing with bcrypt."""

from __future__ import annotations

import asyncio
from functools import cached_property

import bcrypt

# bcrypt only reads the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Hash and verify passwords off the event loop."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def _hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("ascii")

    @staticmethod
    def _verify(password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("ascii"))
        except ValueError:
            # Malformed stored hash or over-long candidate
            return False

    @cached_property
    def dummy_hash(self) -> str:
        """A hash at the configured cost that no real password is checked against."""
        return self._hash("userhub-dummy-password")

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(self._hash, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self._verify, password, password_hash)

    async def verify_against_dummy(self, password: str) -> None:
        """Run a full comparison whose result is discarded, for accounts that do not exist."""
        await asyncio.to_thread(lambda: self._verify(password, self.dummy_hash))
