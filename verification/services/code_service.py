"""Issue and verify one-time guest verification codes."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from email_validator import EmailNotValidError, validate_email

from verification.config import VerificationConfig
from verification.exceptions import (
    DomainBlockedException,
    InvalidEmailException,
    RateLimitedException,
    VerificationException,
)
from verification.interfaces.code_store import CodeEntry, CodeStore
from verification.interfaces.rate_limiter import RateLimiter
from verification.locks import SubjectLocks
from verification.security import codes_match, generate_code
from verification.services.delivery import CodeSender
from verification.services.policy import DomainPolicy, guidance

logger = logging.getLogger(__name__)


def normalize_subject(subject: str) -> str:
    return (subject or "").strip().lower()


@dataclass(frozen=True)
class IssuedCode:
    subject: str
    code: str
    ttl_seconds: int
    expires_at: float


class CodeIssuer:
    def __init__(
        self,
        config: VerificationConfig,
        store: CodeStore,
        rate_limiter: RateLimiter,
        policy: DomainPolicy,
        sender: CodeSender,
        locks: SubjectLocks,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._store = store
        self._rate_limiter = rate_limiter
        self._policy = policy
        self._sender = sender
        self._locks = locks
        self._clock = clock

    async def issue(self, subject: str, client_key: str) -> IssuedCode:
        decision = await self._rate_limiter.hit(
            client_key,
            self._config.RATE_LIMIT_MAX_REQUESTS,
            self._config.RATE_LIMIT_WINDOW_SECONDS,
        )
        if not decision.allowed:
            logger.warning(f"Code issuance rate limited for client {client_key!r}")
            raise RateLimitedException(decision.retry_after)

        subject = normalize_subject(subject)
        verdict = self._policy.evaluate(subject)
        if verdict.reason == "invalid_email":
            raise InvalidEmailException()
        if verdict.reason == "domain_blocked":
            logger.info(f"Guest code refused for claimed domain {verdict.blocked_domain}")
            raise DomainBlockedException(guidance(verdict.blocked_domain), verdict.blocked_domain)
        try:
            validate_email(subject, check_deliverability=False)
        except EmailNotValidError as exc:
            raise InvalidEmailException() from exc

        ttl = self._config.CODE_TTL_SECONDS
        async with self._locks.hold(subject):
            now = self._clock()
            pruned = await self._store.prune_expired(now)
            if pruned:
                logger.debug(f"Pruned {pruned} expired guest codes")
            code = generate_code(self._config.CODE_LENGTH)
            expires_at = now + ttl
            await self._store.set(CodeEntry(subject=subject, code=code, expires_at=expires_at))

        if not await self._sender.send_code(subject, code, ttl):
            async with self._locks.hold(subject):
                current = await self._store.get(subject)
                # A newer issuance for the same subject keeps its entry.
                if current and current.code == code:
                    await self._store.delete(subject)
            raise VerificationException(
                "Failed to send verification code", status_code=502, reason="delivery_failed"
            )

        return IssuedCode(subject=subject, code=code, ttl_seconds=ttl, expires_at=expires_at)


class CodeVerifier:
    def __init__(
        self,
        config: VerificationConfig,
        store: CodeStore,
        locks: SubjectLocks,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._store = store
        self._locks = locks
        self._clock = clock

    async def verify(self, subject: str, supplied_code: str) -> None:
        """Consume the pending code for ``subject`` or raise VerificationException."""
        subject = normalize_subject(subject)
        max_attempts = self._config.MAX_VERIFY_ATTEMPTS

        async with self._locks.hold(subject):
            entry = await self._store.get(subject)
            if not entry:
                raise VerificationException("No pending code", status_code=404, reason="not_found")

            if entry.is_expired(self._clock()):
                await self._store.delete(subject)
                raise VerificationException("Code expired", status_code=410, reason="expired")

            if entry.attempts >= max_attempts:
                await self._store.delete(subject)
                logger.warning(f"Guest code locked out for {subject}")
                raise VerificationException(
                    "Too many attempts", status_code=429, reason="too_many_attempts"
                )

            attempts = await self._store.increment_attempts(subject)

            if codes_match((supplied_code or "").strip(), entry.code):
                await self._store.delete(subject)
                return

            raise VerificationException(
                "Invalid code",
                status_code=401,
                reason="mismatch",
                data={"attemptsRemaining": max(0, max_attempts - attempts)},
            )
