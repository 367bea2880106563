"""Guest email policy routes (server-side check only)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from api.handlers import create_error_response
from verification.dependencies import get_policy
from verification.schemas import PolicyCheckRequest
from verification.services.policy import DomainPolicy, guidance

router = APIRouter()


def _check(email: str, policy: DomainPolicy) -> JSONResponse:
    decision = policy.evaluate(email)
    if decision.reason == "invalid_email":
        return create_error_response(400, "invalid_email")
    if decision.reason == "domain_blocked":
        return create_error_response(
            409,
            "org_domain_blocked",
            guidance(decision.blocked_domain),
            headers={"x-policy-reason": "org_domain_blocked"},
        )
    return JSONResponse(content={"ok": True})


@router.post("/guest-email")
async def check_guest_email(
    payload: PolicyCheckRequest,
    policy: DomainPolicy = Depends(get_policy),
) -> JSONResponse:
    return _check(payload.email, policy)


@router.get("/guest-email")
async def check_guest_email_query(
    email: str = Query(default=""),
    policy: DomainPolicy = Depends(get_policy),
) -> JSONResponse:
    """Handy for manual checks in the browser."""
    return _check(email, policy)
