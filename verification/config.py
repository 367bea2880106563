"""Guest verification configuration management."""

from __future__ import annotations

import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path

# Load .env file before reading config
try:
    from dotenv import load_dotenv

    # Try loading from project root
    env_path = Path(__file__).parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=True)
    else:
        load_dotenv(override=True)
except ImportError:
    pass


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def parse_domains(raw: str | None) -> tuple[str, ...]:
    """Parse a comma-separated domain list (``acme.com,widgets.co.uk``)."""
    if not raw:
        return ()
    domains = []
    for item in raw.split(","):
        domain = item.strip().lower().lstrip("@").rstrip(".")
        if domain and domain not in domains:
            domains.append(domain)
    return tuple(domains)


_DEFAULT_JWT_SECRET = secrets.token_urlsafe(32)


@dataclass(frozen=True)
class VerificationConfig:
    """Configuration values for the guest verification flow."""

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    CLAIMED_ORG_DOMAINS: tuple[str, ...] = field(
        default_factory=lambda: parse_domains(os.getenv("CLAIMED_ORG_DOMAINS"))
    )

    RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("GUEST_CODE_RATE_WINDOW_SECONDS", "300"))
    RATE_LIMIT_MAX_REQUESTS: int = int(os.getenv("GUEST_CODE_RATE_MAX_REQUESTS", "5"))

    CODE_LENGTH: int = int(os.getenv("GUEST_CODE_LENGTH", "6"))
    CODE_TTL_SECONDS: int = int(os.getenv("GUEST_CODE_TTL_SECONDS", "600"))
    MAX_VERIFY_ATTEMPTS: int = int(os.getenv("GUEST_CODE_MAX_ATTEMPTS", "6"))

    # Echo generated codes in API responses. Never enabled implicitly.
    EXPOSE_DEV_CODE: bool = _parse_bool(os.getenv("EXPOSE_DEV_CODE"), False)

    TICKET_TTL_SECONDS: int = int(os.getenv("GUEST_TICKET_TTL_SECONDS", "600"))
    TICKET_COOKIE_NAME: str = os.getenv("GUEST_TICKET_COOKIE_NAME", "guest_verify")

    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
    JWT_ALGORITHM: str = os.getenv("AUTH_JWT_ALGORITHM", "HS256")
    JWT_SECRET: str = os.getenv("AUTH_JWT_SECRET", _DEFAULT_JWT_SECRET)

    COOKIE_SECURE: bool = _parse_bool(os.getenv("COOKIE_SECURE"), False)
    COOKIE_SAMESITE: str = os.getenv("COOKIE_SAME_SITE", "lax")
    COOKIE_DOMAIN: str | None = os.getenv("COOKIE_DOMAIN")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.strip().lower() in {"prod", "production"}

    def validate(self) -> None:
        """Fail closed on settings the flow cannot run safely with."""
        positive = {
            "RATE_LIMIT_WINDOW_SECONDS": self.RATE_LIMIT_WINDOW_SECONDS,
            "RATE_LIMIT_MAX_REQUESTS": self.RATE_LIMIT_MAX_REQUESTS,
            "CODE_TTL_SECONDS": self.CODE_TTL_SECONDS,
            "MAX_VERIFY_ATTEMPTS": self.MAX_VERIFY_ATTEMPTS,
            "TICKET_TTL_SECONDS": self.TICKET_TTL_SECONDS,
        }
        for name, value in positive.items():
            if value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value}")
        if not 4 <= self.CODE_LENGTH <= 10:
            raise ValueError(f"CODE_LENGTH must be between 4 and 10, got {self.CODE_LENGTH}")
        if self.is_production and self.EXPOSE_DEV_CODE:
            raise ValueError("EXPOSE_DEV_CODE must not be enabled in production")
        if self.is_production and self.JWT_SECRET == _DEFAULT_JWT_SECRET:
            raise ValueError("AUTH_JWT_SECRET must be set explicitly in production")
