"""Authenticated identity record and ID-token payload decoding.

Tokens are issued and validated by the identity provider; this module only
reads the claims the app displays. No signature verification happens here.
"""
from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass

LOG = logging.getLogger(__name__)

PLACEHOLDER_PREFIX = "YOUR_GOOGLE_CLIENT_ID"


class IdentityError(ValueError):
    pass


@dataclass(frozen=True)
class AuthenticatedIdentity:
    display_name: str
    email: str
    avatar_url: str = ""

    @property
    def initials(self) -> str:
        parts = [p for p in self.display_name.replace(".", " ").split() if p]
        if not parts or self.display_name == self.email:
            return self.email[:1].upper()
        return "".join(p[0] for p in parts[:2]).upper()


def is_placeholder_client_id(client_id: str | None) -> bool:
    return not client_id or client_id.startswith(PLACEHOLDER_PREFIX)


def _decode_segment(segment: str) -> dict:
    padded = segment + "=" * (-len(segment) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        payload = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise IdentityError("Credential payload is not valid base64url JSON") from exc
    if not isinstance(payload, dict):
        raise IdentityError("Credential payload is not a JSON object")
    return payload


def decode_id_token(credential: str) -> AuthenticatedIdentity:
    """Map the ``name``/``email``/``picture`` claims of a JWT to an identity."""
    parts = (credential or "").strip().split(".")
    if len(parts) != 3 or not parts[1]:
        raise IdentityError("Credential is not a JWT (expected three dot-separated parts)")

    payload = _decode_segment(parts[1])
    email = str(payload.get("email") or "").strip()
    if not email:
        raise IdentityError("Credential has no email claim")

    identity = AuthenticatedIdentity(
        display_name=str(payload.get("name") or email).strip(),
        email=email,
        avatar_url=str(payload.get("picture") or ""),
    )
    LOG.info("Signed in as %s", identity.email)
    return identity
