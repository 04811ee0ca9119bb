"""
JWS JSON Serialization parser (RFC 7515 §7.2).

Accepts both shapes:
- General:   {"payload", "signatures": [{"protected"?, "header"?, "signature"}, ...]}
- Flattened: {"payload", "protected"?, "header"?, "signature"}

``payload`` is omitted when the caller supplies it detached.
"""

import json
import logging
from typing import Any, Optional

from jwsjson.jws.document import JwsJsonDocument
from jwsjson.jws.entry import SignatureEntry
from jwsjson.jws.exceptions import FormatError

log = logging.getLogger(__name__)


def parse_jws_json(signed_document: str, detached_payload: Optional[str] = None) -> JwsJsonDocument:
    """Parse and structurally validate a JSON JWS.

    Args:
        signed_document: The JSON text.
        detached_payload: Base64url payload supplied out-of-band, when the
            document omits ``payload``.

    Returns:
        JwsJsonDocument with at least one signature entry.

    Raises:
        FormatError: payload_conflict, missing_payload, ambiguous_signatures,
            no_signatures, invalid_json or invalid_member.

    Note:
        Signatures are NOT checked here; see JwsJsonDocument.verify_*.
    """
    # Step 1: Decode top-level object
    document = _load_object(signed_document)

    # Step 2: Exactly one payload source
    encoded_payload = document.get("payload")
    if encoded_payload is not None:
        if detached_payload is not None:
            log.warning("JSON JWS includes a payload expected to be detached")
            raise FormatError.payload_conflict()
        if not isinstance(encoded_payload, str):
            raise FormatError.invalid_member("payload must be a string")
    else:
        encoded_payload = detached_payload
    if encoded_payload is None:
        log.warning("JSON JWS has no payload")
        raise FormatError.missing_payload()

    # Step 3: Exactly one signature representation
    entries: list[SignatureEntry] = []
    if "signatures" in document:
        if "signature" in document:
            log.warning("JSON JWS has a flattened 'signature' member and a 'signatures' array")
            raise FormatError.ambiguous_signatures()
        signatures = document["signatures"]
        if not isinstance(signatures, list):
            raise FormatError.invalid_member("signatures must be an array")
        for position, member in enumerate(signatures):
            if not isinstance(member, dict):
                raise FormatError.invalid_member(f"signatures[{position}] must be an object")
            entries.append(_signature_entry(member, encoded_payload, f"signatures[{position}]"))
    elif "signature" in document:
        entries.append(_signature_entry(document, encoded_payload, "flattened JWS"))

    # Step 4: Non-empty
    if not entries:
        log.warning("JSON JWS has no signatures")
        raise FormatError.no_signatures()

    return JwsJsonDocument(
        signed_document=signed_document,
        encoded_payload=encoded_payload,
        signature_entries=tuple(entries),
        is_detached=detached_payload is not None,
    )


def _load_object(signed_document: str) -> dict[str, Any]:
    """Decode the top-level JSON object."""
    if not isinstance(signed_document, (str, bytes, bytearray)):
        raise FormatError.invalid_json("document must be text")
    try:
        parsed = json.loads(signed_document)
    except json.JSONDecodeError as e:
        raise FormatError.invalid_json(str(e))
    except UnicodeDecodeError as e:
        raise FormatError.invalid_json(f"invalid UTF-8: {e}")
    if not isinstance(parsed, dict):
        raise FormatError.invalid_json("JSON root must be an object")
    return parsed


def _signature_entry(member: dict[str, Any], encoded_payload: str, where: str) -> SignatureEntry:
    """Build one entry from a ``signatures`` element or the flattened object."""
    protected = member.get("protected")
    if protected is not None and not isinstance(protected, str):
        raise FormatError.invalid_member(f"{where} protected must be a string")

    header = member.get("header")
    if header is not None and not isinstance(header, dict):
        raise FormatError.invalid_member(f"{where} header must be an object")

    signature = member.get("signature")
    if not isinstance(signature, str):
        raise FormatError.invalid_member(f"{where} signature must be a string")

    return SignatureEntry.create(
        encoded_payload=encoded_payload,
        encoded_signature=signature,
        encoded_protected_header=protected,
        unprotected_header=header,
    )
