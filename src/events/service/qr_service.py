"""Signed QR payloads printed on tickets and scanned at the door."""

import typing as t
from datetime import datetime
from uuid import UUID

import orjson
from django.utils import timezone

from common.signing import sign_payload, verify_payload
from events.models import Registration

REQUIRED_FIELDS = ("registration_id", "event_id", "user_id", "ticket_number", "quantity", "timestamp")


def generate_qr_payload(registration: Registration, *, now: t.Callable[[], datetime] = timezone.now) -> str:
    """Build the signed JSON string encoded into the registration's QR code."""
    payload = {
        "registration_id": str(registration.id),
        "event_id": str(registration.event_id),
        "user_id": str(registration.user_id),
        "ticket_number": registration.ticket_number,
        "quantity": registration.ticket_count(),
        "timestamp": now().isoformat(),
    }
    return orjson.dumps(sign_payload(payload)).decode()


def verify_qr_payload(data: str) -> dict[str, t.Any] | None:
    """Parse and verify a scanned payload.

    Returns:
        The payload without its signature, or None if it is not valid JSON,
        lacks a field, or its signature does not match.
    """
    try:
        signed = orjson.loads(data)
    except orjson.JSONDecodeError:
        return None
    if not isinstance(signed, dict):
        return None
    payload = verify_payload(signed)
    if payload is None or any(field not in payload for field in REQUIRED_FIELDS):
        return None
    try:
        UUID(str(payload["registration_id"]))
    except ValueError:
        return None
    return payload
