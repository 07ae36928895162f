"""Opaque, URL-safe references for internal primary keys."""

import base64
import binascii

from .exceptions import NotFound


def encode_id(kind: str, pk: int) -> str:
    raw = f"{kind}:{int(pk)}".encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_id(reference: str, kind: str) -> int:
    if not isinstance(reference, str) or not reference:
        raise NotFound(f"Invalid {kind} reference.")

    padded = reference + "=" * (-len(reference) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError):
        raise NotFound(f"Invalid {kind} reference.")

    prefix, _, value = raw.partition(":")
    if prefix != kind or not (value.isascii() and value.isdigit()):
        raise NotFound(f"Invalid {kind} reference.")
    return int(value)
