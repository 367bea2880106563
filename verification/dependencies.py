"""Guest verification dependency helpers."""

from __future__ import annotations

from fastapi import Depends, Request, Response

from verification.config import VerificationConfig
from verification.locks import SubjectLocks
from verification.services.code_service import CodeIssuer, CodeVerifier
from verification.services.delivery import LoggingCodeSender
from verification.services.guest_service import GuestService
from verification.services.policy import DomainPolicy
from verification.stores.memory_store import (
    MemoryCodeStore,
    MemoryGuestProfileStore,
    MemoryRateLimiter,
    MemoryTicketStore,
)


_config = VerificationConfig()

_memory_code_store = MemoryCodeStore()
_memory_rate_limiter = MemoryRateLimiter()
_memory_ticket_store = MemoryTicketStore()
_memory_profile_store = MemoryGuestProfileStore()
_subject_locks = SubjectLocks()
_code_sender = LoggingCodeSender(log_codes=_config.EXPOSE_DEV_CODE)


def get_config() -> VerificationConfig:
    return _config


def get_policy(config: VerificationConfig = Depends(get_config)) -> DomainPolicy:
    return DomainPolicy(config.CLAIMED_ORG_DOMAINS)


def get_code_issuer(
    config: VerificationConfig = Depends(get_config),
    policy: DomainPolicy = Depends(get_policy),
) -> CodeIssuer:
    return CodeIssuer(
        config=config,
        store=_memory_code_store,
        rate_limiter=_memory_rate_limiter,
        policy=policy,
        sender=_code_sender,
        locks=_subject_locks,
    )


def get_code_verifier(config: VerificationConfig = Depends(get_config)) -> CodeVerifier:
    return CodeVerifier(config=config, store=_memory_code_store, locks=_subject_locks)


def get_guest_service(config: VerificationConfig = Depends(get_config)) -> GuestService:
    return GuestService(
        config=config,
        ticket_store=_memory_ticket_store,
        profile_store=_memory_profile_store,
    )


def client_key(request: Request) -> str:
    """Per-client rate limit key: first forwarded hop plus user agent."""
    forwarded = request.headers.get("x-forwarded-for", "")
    ip = forwarded.split(",")[0].strip()
    if not ip:
        ip = request.client.host if request.client else "local"
    user_agent = request.headers.get("user-agent") or "ua"
    return f"{ip}::{user_agent}"


def set_cookie(
    response: Response,
    config: VerificationConfig,
    key: str,
    value: str,
    max_age: int | None = None,
) -> None:
    response.set_cookie(
        key=key,
        value=value,
        max_age=max_age,
        path="/",
        httponly=True,
        secure=config.COOKIE_SECURE or config.is_production,
        samesite=config.COOKIE_SAMESITE,
        domain=config.COOKIE_DOMAIN,
    )
