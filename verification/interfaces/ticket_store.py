"""Verify-ticket store interface for the account completion step."""

from __future__ import annotations

from typing import Protocol


class TicketStore(Protocol):
    async def save(self, ticket: str, email: str, expires_at: float) -> None:
        ...

    async def get(self, ticket: str) -> dict | None:
        ...

    async def delete(self, ticket: str) -> None:
        ...

    async def prune_expired(self, now: float) -> int:
        ...
