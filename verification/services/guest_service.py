"""Account completion for verified guests."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from verification.config import VerificationConfig
from verification.exceptions import VerificationException
from verification.interfaces.guest_store import GuestProfileStore
from verification.interfaces.ticket_store import TicketStore
from verification.security import create_access_token, decode_token, generate_ticket, hash_password

logger = logging.getLogger(__name__)


class GuestService:
    def __init__(
        self,
        config: VerificationConfig,
        ticket_store: TicketStore,
        profile_store: GuestProfileStore,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._tickets = ticket_store
        self._profiles = profile_store
        self._clock = clock

    async def mint_ticket(self, email: str) -> tuple[str, int]:
        """Create the short-lived ticket that proves ``email`` was just verified."""
        now = self._clock()
        pruned = await self._tickets.prune_expired(now)
        if pruned:
            logger.debug(f"Pruned {pruned} expired verify tickets")
        ticket = generate_ticket()
        max_age = self._config.TICKET_TTL_SECONDS
        await self._tickets.save(ticket, email.strip().lower(), now + max_age)
        return ticket, max_age

    async def complete(
        self,
        ticket: str | None,
        password: str | None = None,
        display_name: str | None = None,
    ) -> dict[str, Any]:
        if not ticket:
            raise VerificationException("Missing verification ticket", status_code=401, reason="no_ticket")

        record = await self._tickets.get(ticket)
        if not record:
            raise VerificationException("Verification ticket not found", status_code=404, reason="not_found")

        # Consumed before any checks so a ticket can never be replayed.
        await self._tickets.delete(ticket)

        if self._clock() >= float(record["expires_at"]):
            raise VerificationException("Verification ticket expired", status_code=410, reason="expired")

        email = record["email"]
        updates: dict[str, Any] = {}
        if password:
            updates["hashed_password"] = hash_password(password)
        if display_name is not None:
            updates["display_name"] = display_name.strip() or None

        profile = await self._profiles.get_by_email(email)
        is_new = profile is None
        if is_new:
            profile = await self._profiles.create_profile({"personal_email": email, **updates})
            logger.info(f"Created guest profile {profile['id']} for {email}")
        elif updates:
            profile = await self._profiles.update_profile(profile["id"], updates)

        access_token = create_access_token(self._config, email, profile["id"])
        return {"profile": profile, "is_new": is_new, "access_token": access_token}

    async def get_profile(self, access_token: str | None) -> dict[str, Any]:
        """Resolve the guest profile behind a session access token."""
        if not access_token:
            raise VerificationException("Unauthorized", status_code=401, reason="unauthorized")

        claims = decode_token(self._config, access_token)
        guest_profile_id = claims.get("guest_profile_id")
        if claims.get("type") != "access" or not guest_profile_id:
            raise VerificationException(
                "Forbidden (staff cannot use this endpoint)", status_code=403, reason="forbidden"
            )

        profile = await self._profiles.get_by_id(str(guest_profile_id))
        if not profile:
            raise VerificationException("Guest profile not found", status_code=404, reason="not_found")
        return profile
