"""In-memory guest verification stores.

Everything here is process-local and resets on restart. A multi-instance
deployment needs shared implementations of the same protocols.
"""

from __future__ import annotations

import asyncio
import math
import time
from dataclasses import replace
from typing import Any, Callable
from uuid import uuid4

from verification.interfaces.code_store import CodeEntry
from verification.interfaces.rate_limiter import RateLimitDecision


class MemoryCodeStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._entries: dict[str, CodeEntry] = {}

    async def get(self, subject: str) -> CodeEntry | None:
        async with self._lock:
            entry = self._entries.get(subject)
            return replace(entry) if entry else None

    async def set(self, entry: CodeEntry) -> None:
        async with self._lock:
            self._entries[entry.subject] = replace(entry)

    async def delete(self, subject: str) -> None:
        async with self._lock:
            self._entries.pop(subject, None)

    async def increment_attempts(self, subject: str) -> int:
        async with self._lock:
            entry = self._entries.get(subject)
            if not entry:
                return 0
            entry.attempts += 1
            return entry.attempts

    async def prune_expired(self, now: float) -> int:
        async with self._lock:
            expired = [subject for subject, entry in self._entries.items() if entry.is_expired(now)]
            for subject in expired:
                del self._entries[subject]
            return len(expired)

    def __len__(self) -> int:
        return len(self._entries)


class MemoryRateLimiter:
    """Fixed-window counter per client key."""

    # Elapsed buckets are swept once the map grows past this size.
    PRUNE_THRESHOLD = 1024

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._lock = asyncio.Lock()
        self._clock = clock
        self._buckets: dict[str, dict[str, float]] = {}

    async def hit(self, key: str, limit: int, window_seconds: int) -> RateLimitDecision:
        now = self._clock()
        async with self._lock:
            if len(self._buckets) > self.PRUNE_THRESHOLD:
                self._prune(now)
            bucket = self._buckets.get(key)
            if not bucket or now >= bucket["reset_at"]:
                bucket = {"count": 1, "reset_at": now + window_seconds}
                self._buckets[key] = bucket
            else:
                bucket["count"] += 1
            count = int(bucket["count"])
            if count > limit:
                retry_after = max(1, math.ceil(bucket["reset_at"] - now))
                return RateLimitDecision(allowed=False, count=count, retry_after=retry_after)
            return RateLimitDecision(allowed=True, count=count)

    def _prune(self, now: float) -> None:
        elapsed = [key for key, bucket in self._buckets.items() if now >= bucket["reset_at"]]
        for key in elapsed:
            del self._buckets[key]

    def __len__(self) -> int:
        return len(self._buckets)


class MemoryTicketStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._tickets: dict[str, dict[str, Any]] = {}

    async def save(self, ticket: str, email: str, expires_at: float) -> None:
        async with self._lock:
            self._tickets[ticket] = {"email": email.lower(), "expires_at": expires_at}

    async def get(self, ticket: str) -> dict | None:
        async with self._lock:
            record = self._tickets.get(ticket)
            return dict(record) if record else None

    async def delete(self, ticket: str) -> None:
        async with self._lock:
            self._tickets.pop(ticket, None)

    async def prune_expired(self, now: float) -> int:
        async with self._lock:
            expired = [ticket for ticket, record in self._tickets.items() if now >= record["expires_at"]]
            for ticket in expired:
                del self._tickets[ticket]
            return len(expired)

    def __len__(self) -> int:
        return len(self._tickets)


class MemoryGuestProfileStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._profiles_by_email: dict[str, dict[str, Any]] = {}
        self._profiles_by_id: dict[str, dict[str, Any]] = {}

    async def get_by_email(self, email: str) -> dict | None:
        async with self._lock:
            profile = self._profiles_by_email.get(email.lower())
            return dict(profile) if profile else None

    async def get_by_id(self, profile_id: str) -> dict | None:
        async with self._lock:
            profile = self._profiles_by_id.get(profile_id)
            return dict(profile) if profile else None

    async def create_profile(self, data: dict) -> dict:
        async with self._lock:
            payload = dict(data)
            payload["personal_email"] = payload["personal_email"].lower()
            if payload["personal_email"] in self._profiles_by_email:
                raise ValueError("Guest profile already exists")
            payload["id"] = uuid4().hex
            payload.setdefault("display_name", None)
            payload.setdefault("hashed_password", None)
            payload.setdefault("inviteable", True)
            payload.setdefault("listed_public", False)
            payload["created_at"] = payload.get("created_at", int(time.time()))
            payload["updated_at"] = payload.get("updated_at", payload["created_at"])
            self._profiles_by_email[payload["personal_email"]] = payload
            self._profiles_by_id[payload["id"]] = payload
            return dict(payload)

    async def update_profile(self, profile_id: str, updates: dict) -> dict:
        async with self._lock:
            profile = self._profiles_by_id.get(profile_id)
            if not profile:
                raise ValueError("Guest profile not found")
            for key, value in updates.items():
                profile[key] = value
            profile["updated_at"] = int(time.time())
            return dict(profile)
