"""
Response DTOs for link management and the redirect engine.

UrlResponse               — POST /api/urls (201), GET/PATCH /api/urls/{id}
VerifyPasswordResponse    — POST /api/verify-password (200)
PasswordChallengeResponse — GET /{short_code}/password (200)

Keys are camelCase on the wire. The stored password is never part of any
response; ``passwordProtected`` says whether one is set.
"""

from __future__ import annotations

from typing import Optional

from schemas.dto.camel import CamelModel
from schemas.models.url import UrlDoc


class UrlResponse(CamelModel):
    """A link as seen by its owner. Timestamps are ISO 8601 strings."""

    id: str
    short_code: str
    short_url: str
    original_url: str
    title: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = []
    is_active: bool
    expires_at: Optional[str] = None
    click_limit: Optional[int] = None
    click_count: int
    password_protected: bool
    created_at: str
    updated_at: str

    @classmethod
    def from_doc(cls, doc: UrlDoc, base_url: str) -> "UrlResponse":
        return cls(
            id=str(doc.id),
            short_code=doc.short_code,
            short_url=f"{base_url}/{doc.short_code}",
            original_url=doc.original_url,
            title=doc.title,
            description=doc.description,
            tags=list(doc.tags),
            is_active=doc.is_active,
            expires_at=doc.expires_at.isoformat() if doc.expires_at else None,
            click_limit=doc.click_limit,
            click_count=doc.click_count,
            password_protected=doc.password_protected,
            created_at=doc.created_at.isoformat(),
            updated_at=doc.updated_at.isoformat(),
        )


class VerifyPasswordResponse(CamelModel):
    original_url: str


class PasswordChallengeResponse(CamelModel):
    short_code: str
    password_required: bool
