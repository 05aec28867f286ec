from __future__ import annotations

from typing import Any

import jwt

from messenger_service.application.dto.principal import Principal


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    """``sub`` carries the caller's messenger handle or legacy user id."""
    subject = str(payload.get("sub") or "").strip()
    if not subject:
        raise jwt.InvalidTokenError("Token has no subject")
    return Principal(subject=subject)
