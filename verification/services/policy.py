"""Claimed-domain policy for guest emails.

Domains claimed by an organization are staff-only: a guest must sign up with
a personal address. A claimed domain also covers all of its subdomains, so
``a.b.acme.com`` is blocked when ``acme.com`` is claimed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class PolicyDecision:
    allowed: bool
    reason: str | None = None
    blocked_domain: str | None = None


def extract_domain(email: str) -> str | None:
    """Return the lowercased part after the final ``@``, or None if malformed."""
    if not email:
        return None
    at = email.rfind("@")
    if at <= 0 or at == len(email) - 1:
        return None
    return email[at + 1 :].strip().lower() or None


def guidance(domain: str) -> str:
    return (
        f"This email domain ({domain}) is managed by an organization here. "
        'To continue: use a personal email for guest access, or choose "I was invited" to join as staff.'
    )


class DomainPolicy:
    def __init__(self, claimed_domains: Iterable[str]) -> None:
        self._claimed = frozenset(d.strip().lower() for d in claimed_domains if d and d.strip())

    def is_claimed(self, domain: str) -> bool:
        domain = domain.lower()
        return any(domain == claimed or domain.endswith("." + claimed) for claimed in self._claimed)

    def evaluate(self, email: str) -> PolicyDecision:
        domain = extract_domain((email or "").strip())
        if domain is None:
            return PolicyDecision(allowed=False, reason="invalid_email")
        if self.is_claimed(domain):
            return PolicyDecision(allowed=False, reason="domain_blocked", blocked_domain=domain)
        return PolicyDecision(allowed=True)
