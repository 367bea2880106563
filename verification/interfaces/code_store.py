"""Verification code store interface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass
class CodeEntry:
    subject: str
    code: str
    expires_at: float
    attempts: int = 0

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class CodeStore(Protocol):
    async def get(self, subject: str) -> CodeEntry | None:
        ...

    async def set(self, entry: CodeEntry) -> None:
        ...

    async def delete(self, subject: str) -> None:
        ...

    async def increment_attempts(self, subject: str) -> int:
        ...

    async def prune_expired(self, now: float) -> int:
        ...
