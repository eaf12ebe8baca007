"""Share link endpoints: create, redeem once, and report default limits.

Handlers are plain ``def`` functions so FastAPI runs them in its threadpool;
the store serializes access itself.
"""

from __future__ import annotations

import base64
import binascii
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field, field_validator

from oneshare.app.core.config import Settings
from oneshare.app.db.store import ShareStore, UserLimits
from oneshare.app.services.lifecycle import MessageLifecycle
from oneshare.app.services.quota import QuotaEngine

router = APIRouter(tags=["shares"])


def get_store(request: Request) -> ShareStore:
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_clock(request: Request):
    return request.app.state.clock


StoreDep = Annotated[ShareStore, Depends(get_store)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


class SaveMessageRequest(BaseModel):
    user_token: str = Field(..., min_length=1, max_length=256)
    # Base64 encoded payload; stored as-is
    message_data: str = Field(..., min_length=1)
    # Minutes; omitted or 0 asks for no expiry
    retention: int | None = Field(default=None, ge=0)

    @field_validator("user_token")
    @classmethod
    def normalize_user_token(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("user_token cannot be empty")
        return v


class ConsumeMessageRequest(BaseModel):
    message_token: str = Field(..., min_length=1, max_length=256)


class ConsumeMessageResponse(BaseModel):
    status: str
    message: str | None = None


class LimitsResponse(BaseModel):
    messageLimitBytes: int
    retentionLimitMinutes: int


def decoded_payload_size(message_data: str) -> int:
    """Size in bytes of the base64 payload once decoded.

    Raises:
        HTTPException: 400 if the payload is not valid base64.
    """
    try:
        return len(base64.b64decode(message_data, validate=True))
    except (binascii.Error, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="message_data is not valid base64",
        )


def share_url(request: Request, cfg: Settings, message_token: str) -> str:
    base = cfg.share_base_url or f"https://{request.headers.get('host', request.url.netloc)}"
    return f"{base}/shared/{message_token}"


@router.post("/save", response_class=PlainTextResponse)
def save_message(
    data: SaveMessageRequest,
    request: Request,
    store: StoreDep,
    cfg: SettingsDep,
) -> str:
    """Create a one-time message and return its share link.

    Quota denials are raised as QuotaDeniedError and rendered by the
    application's exception handler.
    """
    now = int(get_clock(request)())
    retention = data.retention or 0
    size = decoded_payload_size(data.message_data)

    quota = QuotaEngine(store)
    decision = quota.validate(data.user_token, retention, size, now)
    decision.raise_for_denial()

    message_token = MessageLifecycle(store).create(data.message_data, retention, now)
    # Cooldown starts only once the message is stored
    quota.record_creation(data.user_token, now)
    return share_url(request, cfg, message_token)


@router.post("/consume", response_model=ConsumeMessageResponse, response_model_exclude_none=True)
def consume_message(data: ConsumeMessageRequest, store: StoreDep) -> ConsumeMessageResponse:
    """Return the message once; every later call reports not-found.

    Missing and already consumed messages are indistinguishable on purpose.
    """
    consumed = MessageLifecycle(store).consume(data.message_token)
    if consumed is None:
        return ConsumeMessageResponse(status="not-found")
    return ConsumeMessageResponse(status="ok", message=consumed.data)


@router.get("/limits", response_model=LimitsResponse)
def get_limits(store: StoreDep, cfg: SettingsDep) -> LimitsResponse:
    """Limits of the default user, as shown on the public page."""
    limits = store.get_user_limits(cfg.default_user_token) or UserLimits()
    return LimitsResponse(
        messageLimitBytes=limits.max_size_bytes,
        retentionLimitMinutes=limits.retention_limit_minutes,
    )
