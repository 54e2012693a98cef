"""
Access evaluation for short links — a pure decision function.

Given a link (or None), the current time and an optional visitor-supplied
password, ``evaluate`` decides whether the visit may be redirected and, if
not, why. Checks run in a fixed order and the first match wins:

    1. link absent            → NOT_FOUND
    2. link deactivated       → INACTIVE
    3. expiry in the past     → EXPIRED
    4. click limit reached    → CLICK_LIMIT_REACHED
    5. password set:
         none supplied        → PASSWORD_REQUIRED
         supplied, mismatch   → PASSWORD_INCORRECT
    6. otherwise              → ALLOW(original_url)

Lifecycle checks therefore take precedence over password gating: an expired
password-protected link reports EXPIRED, never PASSWORD_REQUIRED.

The function has no side effects and is safe to call repeatedly, e.g. once
when the link is opened and again when the visitor submits the password.
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from errors import AppError, AuthenticationError, GoneError, NotFoundError
from schemas.models.url import UrlDoc
from shared.datetime_utils import ensure_utc


class AccessDecision(str, Enum):
    ALLOW = "allow"
    NOT_FOUND = "not_found"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    CLICK_LIMIT_REACHED = "click_limit_reached"
    PASSWORD_REQUIRED = "password_required"
    PASSWORD_INCORRECT = "password_incorrect"


# Client-facing messages for each denial
DENIAL_MESSAGES: dict[AccessDecision, str] = {
    AccessDecision.NOT_FOUND: "URL not found",
    AccessDecision.INACTIVE: "URL is inactive",
    AccessDecision.EXPIRED: "URL has expired",
    AccessDecision.CLICK_LIMIT_REACHED: "URL has reached its click limit",
    AccessDecision.PASSWORD_REQUIRED: "Password required",
    AccessDecision.PASSWORD_INCORRECT: "Invalid password",
}


@dataclass(frozen=True)
class AccessOutcome:
    decision: AccessDecision
    target: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.decision is AccessDecision.ALLOW

    @property
    def message(self) -> Optional[str]:
        return DENIAL_MESSAGES.get(self.decision)

    @classmethod
    def allow(cls, target: str) -> "AccessOutcome":
        return cls(AccessDecision.ALLOW, target)

    @classmethod
    def deny(cls, decision: AccessDecision) -> "AccessOutcome":
        return cls(decision)


def evaluate(
    record: Optional[UrlDoc],
    now: datetime,
    supplied_password: Optional[str] = None,
) -> AccessOutcome:
    """Decide the redirect outcome for *record* at time *now*.

    Args:
        record: The link with its ``click_count`` populated, or None when the
            short code does not resolve.
        now: Evaluation instant. Naive datetimes are treated as UTC.
        supplied_password: Password submitted by the visitor, if any. An empty
            string counts as supplied (and will not match a real password).

    Returns:
        An ``AccessOutcome``; ``target`` is set only when access is allowed.
    """
    if record is None:
        return AccessOutcome.deny(AccessDecision.NOT_FOUND)

    if not record.is_active:
        return AccessOutcome.deny(AccessDecision.INACTIVE)

    expires_at = ensure_utc(record.expires_at)
    if expires_at is not None and ensure_utc(now) > expires_at:
        return AccessOutcome.deny(AccessDecision.EXPIRED)

    if record.click_limit is not None and record.click_count >= record.click_limit:
        return AccessOutcome.deny(AccessDecision.CLICK_LIMIT_REACHED)

    if record.password:
        if supplied_password is None:
            return AccessOutcome.deny(AccessDecision.PASSWORD_REQUIRED)
        # Exact match on the stored plaintext secret
        if not hmac.compare_digest(
            supplied_password.encode("utf-8"), record.password.encode("utf-8")
        ):
            return AccessOutcome.deny(AccessDecision.PASSWORD_INCORRECT)

    return AccessOutcome.allow(record.original_url)


def denial_error(outcome: AccessOutcome) -> AppError:
    """Map a denied outcome onto the HTTP error it is reported as.

    PASSWORD_REQUIRED is not an error on the redirect path (it redirects to
    the challenge); elsewhere it is reported like an incorrect password.
    """
    if outcome.allowed:
        raise ValueError("denial_error() called with an allowed outcome")
    message = outcome.message or "Access denied"
    if outcome.decision is AccessDecision.NOT_FOUND:
        return NotFoundError(message)
    if outcome.decision in (
        AccessDecision.INACTIVE,
        AccessDecision.EXPIRED,
        AccessDecision.CLICK_LIMIT_REACHED,
    ):
        return GoneError(message, details={"reason": outcome.decision.value})
    return AuthenticationError(message)
