"""HMAC signing for payloads handed out to clients.

Used for the QR codes printed on tickets: the payload travels through an
untrusted channel (a screenshot, a printout) and comes back at the door,
so the server must be able to tell a genuine payload from an edited one.

Format:
    The payload is serialized canonically (sorted keys, compact separators)
    with orjson, and signed with HMAC-SHA256. The signature is hex-encoded
    and stored next to the payload under ``sig``.

Security:
    - The key is derived from Django's SECRET_KEY with a domain-specific
      prefix, so it is isolated from other SECRET_KEY uses.
    - Verification uses hmac.compare_digest() to prevent timing attacks.
"""

import hashlib
import hmac
import typing as t
from functools import lru_cache

import orjson
from django.conf import settings

__all__ = [
    "SIGNATURE_FIELD",
    "canonical_bytes",
    "sign_payload",
    "verify_payload",
]

SIGNATURE_FIELD = "sig"

_KEY_DOMAIN = "doorlist:qr-payload:v1"


@lru_cache(maxsize=1)
def _get_signing_key() -> bytes:
    """Get the signing key, derived from Django's SECRET_KEY.

    The key is lazily computed on first use and cached for the lifetime
    of the process.
    """
    return hashlib.sha256(f"{_KEY_DOMAIN}:{settings.SECRET_KEY}".encode()).digest()


def canonical_bytes(payload: dict[str, t.Any]) -> bytes:
    """Serialize a payload deterministically for signing."""
    return orjson.dumps(payload, option=orjson.OPT_SORT_KEYS)


def generate_signature(payload: dict[str, t.Any]) -> str:
    """Return the hex HMAC-SHA256 signature of a payload."""
    return hmac.new(_get_signing_key(), canonical_bytes(payload), hashlib.sha256).hexdigest()


def sign_payload(payload: dict[str, t.Any]) -> dict[str, t.Any]:
    """Return a copy of the payload with its signature attached."""
    return {**payload, SIGNATURE_FIELD: generate_signature(payload)}


def verify_payload(signed: dict[str, t.Any]) -> dict[str, t.Any] | None:
    """Verify a signed payload.

    Args:
        signed: A payload previously produced by sign_payload.

    Returns:
        The payload without its signature if the signature matches, None otherwise.
    """
    sig = signed.get(SIGNATURE_FIELD)
    if not isinstance(sig, str):
        return None
    payload = {k: v for k, v in signed.items() if k != SIGNATURE_FIELD}
    if not hmac.compare_digest(sig, generate_signature(payload)):
        return None
    return payload
