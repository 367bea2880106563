"""Guest profile store interface."""

from __future__ import annotations

from typing import Protocol


class GuestProfileStore(Protocol):
    async def get_by_email(self, email: str) -> dict | None:
        ...

    async def get_by_id(self, profile_id: str) -> dict | None:
        ...

    async def create_profile(self, data: dict) -> dict:
        ...

    async def update_profile(self, profile_id: str, updates: dict) -> dict:
        ...
