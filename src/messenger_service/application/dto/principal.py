from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller identity extracted from JWT.

    ``subject`` is whatever the token issuer put in ``sub``: a messenger
    handle for newer accounts, the legacy user id for older tokens.
    """

    subject: str
