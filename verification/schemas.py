"""Guest verification request/response schemas."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class SendCodeRequest(BaseModel):
    email: str = Field(default="", max_length=320)


class SendCodeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    message: str
    ttl_seconds: int = Field(serialization_alias="ttlSeconds")
    dev_code: str | None = Field(default=None, serialization_alias="devCode")


class VerifyCodeRequest(BaseModel):
    subject: str = Field(
        default="",
        max_length=320,
        validation_alias=AliasChoices("subject", "email"),
    )
    code: str = Field(default="", max_length=32)


class CompleteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    password: str | None = Field(default=None, min_length=8, max_length=128)
    display_name: str | None = Field(
        default=None,
        max_length=200,
        validation_alias=AliasChoices("displayName", "display_name"),
    )


class CompleteResponse(BaseModel):
    ok: bool = True
    email: str
    guest_profile_id: str = Field(serialization_alias="guestProfileId")


class PolicyCheckRequest(BaseModel):
    email: str = Field(default="", max_length=320)


class OkResponse(BaseModel):
    ok: bool = True


class GuestProfileView(BaseModel):
    id: str
    email: str
    display_name: str = Field(serialization_alias="displayName")
    inviteable: bool
    listed_public: bool = Field(serialization_alias="listedPublic")
    updated_at: int = Field(serialization_alias="updatedAt")


class GuestProfileResponse(BaseModel):
    ok: bool = True
    profile: GuestProfileView
