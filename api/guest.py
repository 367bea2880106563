"""Guest verification API routes."""

from __future__ import annotations

import re

from fastapi import APIRouter, Body, Cookie, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from api.handlers import create_error_response
from verification.config import VerificationConfig
from verification.dependencies import (
    client_key,
    get_code_issuer,
    get_code_verifier,
    get_config,
    get_guest_service,
    set_cookie,
)
from verification.exceptions import VerificationException
from verification.schemas import (
    CompleteRequest,
    CompleteResponse,
    GuestProfileResponse,
    GuestProfileView,
    OkResponse,
    SendCodeRequest,
    SendCodeResponse,
    VerifyCodeRequest,
)
from verification.services.code_service import CodeIssuer, CodeVerifier
from verification.services.guest_service import GuestService

router = APIRouter()


@router.post(
    "/send-code",
    response_model=SendCodeResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
)
async def send_code(
    payload: SendCodeRequest,
    request: Request,
    config: VerificationConfig = Depends(get_config),
    issuer: CodeIssuer = Depends(get_code_issuer),
) -> SendCodeResponse:
    issued = await issuer.issue(payload.email, client_key(request))

    if config.EXPOSE_DEV_CODE:
        return SendCodeResponse(
            message="Code generated (dev stub).",
            ttl_seconds=issued.ttl_seconds,
            dev_code=issued.code,
        )
    return SendCodeResponse(message="Code sent.", ttl_seconds=issued.ttl_seconds)


@router.post("/verify-code", response_model=OkResponse, status_code=status.HTTP_200_OK)
async def verify_code(
    payload: VerifyCodeRequest,
    response: Response,
    config: VerificationConfig = Depends(get_config),
    verifier: CodeVerifier = Depends(get_code_verifier),
    guest_service: GuestService = Depends(get_guest_service),
) -> OkResponse:
    subject = payload.subject.strip().lower()
    code = payload.code.strip()
    if not subject or not re.fullmatch(rf"\d{{{config.CODE_LENGTH}}}", code):
        raise VerificationException("Invalid input", status_code=400, reason="invalid_input")

    await verifier.verify(subject, code)

    ticket, max_age = await guest_service.mint_ticket(subject)
    set_cookie(response, config, config.TICKET_COOKIE_NAME, ticket, max_age=max_age)
    return OkResponse()


@router.post("/complete", response_model=CompleteResponse, status_code=status.HTTP_200_OK)
async def complete(
    request: Request,
    payload: CompleteRequest | None = Body(default=None),
    config: VerificationConfig = Depends(get_config),
    guest_service: GuestService = Depends(get_guest_service),
):
    payload = payload or CompleteRequest()
    ticket = request.cookies.get(config.TICKET_COOKIE_NAME)
    try:
        result = await guest_service.complete(
            ticket,
            password=payload.password,
            display_name=payload.display_name,
        )
    except VerificationException as exc:
        error_response = create_error_response(exc.status_code, exc.reason, exc.message, exc.data)
        if ticket:
            error_response.delete_cookie(config.TICKET_COOKIE_NAME, path="/", domain=config.COOKIE_DOMAIN)
        return error_response

    body = CompleteResponse(
        email=result["profile"]["personal_email"],
        guest_profile_id=result["profile"]["id"],
    )
    success = JSONResponse(content=body.model_dump(by_alias=True))
    success.delete_cookie(config.TICKET_COOKIE_NAME, path="/", domain=config.COOKIE_DOMAIN)
    set_cookie(
        success,
        config,
        "access_token",
        result["access_token"],
        max_age=config.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    return success


@router.get("/profile", response_model=GuestProfileResponse, status_code=status.HTTP_200_OK)
async def profile(
    access_token: str | None = Cookie(default=None),
    guest_service: GuestService = Depends(get_guest_service),
) -> GuestProfileResponse:
    """Current guest's profile slice."""
    record = await guest_service.get_profile(access_token)
    return GuestProfileResponse(
        profile=GuestProfileView(
            id=record["id"],
            email=record["personal_email"],
            display_name=record.get("display_name") or "",
            inviteable=bool(record.get("inviteable")),
            listed_public=bool(record.get("listed_public")),
            updated_at=int(record["updated_at"]),
        )
    )
