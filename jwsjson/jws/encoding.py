"""Base64url and JSON helpers shared by the parser, entries and verifiers."""

import base64
import json
import re
from typing import Any

from jwsjson.jws.exceptions import FormatError

_B64URL_RE = re.compile(r"[A-Za-z0-9_-]*=*")


def b64url_encode(data: bytes) -> str:
    """Base64url encode bytes without padding (RFC 7515 §2)."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(encoded: str, part_name: str = "value") -> bytes:
    """Decode an unpadded base64url string to bytes."""
    if not isinstance(encoded, str):
        raise FormatError.invalid_member(f"{part_name} must be a base64url string")
    if not _B64URL_RE.fullmatch(encoded):
        raise FormatError.invalid_member(f"{part_name} contains non-base64url characters")
    try:
        # Add padding if needed
        padded = encoded + "=" * (-len(encoded) % 4)
        return base64.urlsafe_b64decode(padded)
    except Exception as e:
        raise FormatError.invalid_member(f"{part_name} base64url decode failed: {e}")


def b64url_decode_json(encoded: str, part_name: str) -> dict[str, Any]:
    """Decode a base64url-encoded JSON object (e.g. a protected header)."""
    decoded_bytes = b64url_decode(encoded, part_name)
    try:
        parsed = json.loads(decoded_bytes)
    except json.JSONDecodeError as e:
        raise FormatError.invalid_json(f"{part_name} JSON parse failed: {e}")
    except UnicodeDecodeError as e:
        raise FormatError.invalid_json(f"{part_name} invalid UTF-8: {e}")
    if not isinstance(parsed, dict):
        raise FormatError.invalid_json(f"{part_name} JSON root must be an object")
    return parsed


def b64url_decode_text(encoded: str, part_name: str = "payload") -> str:
    """Decode base64url to a UTF-8 string."""
    try:
        return b64url_decode(encoded, part_name).decode("utf-8")
    except UnicodeDecodeError as e:
        raise FormatError.invalid_member(f"{part_name} invalid UTF-8: {e}")
