"""
Request DTOs for link management and password verification.

JSON bodies use camelCase keys (``originalUrl``, ``clickLimit``...); the
models accept snake_case too so services and tests can build them directly.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import Field

from schemas.dto.camel import CamelModel


class CreateUrlRequest(CamelModel):
    """Request body for creating a new short link (POST /api/urls)."""

    original_url: str = Field(min_length=1, max_length=2048)
    title: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    tags: list[str] = Field(default_factory=list)
    password: Optional[str] = None
    click_limit: Optional[int] = Field(default=None, gt=0, strict=True)
    # ISO 8601 string or Unix epoch seconds — service layer does the conversion
    expires_at: Optional[Union[str, int, float]] = None


class UpdateUrlRequest(CamelModel):
    """Request body for partially updating a link (PATCH /api/urls/{id}).

    Only fields present in the body are applied; ``expiresAt: null`` clears
    the expiry. The target URL, short code, password and click limit are
    fixed at creation.
    """

    is_active: Optional[bool] = None
    title: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    tags: Optional[list[str]] = None
    expires_at: Optional[Union[str, int, float]] = None


class VerifyPasswordRequest(CamelModel):
    """Request body for POST /api/verify-password.

    Both fields are optional at the schema level so that a missing value is
    reported with the endpoint's own 400 message.
    """

    short_code: Optional[str] = None
    password: Optional[str] = None
