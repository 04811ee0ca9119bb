"""Parsed JWS JSON document (RFC 7515 §7.2).

The document holds the shared encoded payload and an immutable tuple of
signature entries. It is built once by ``parse_jws_json`` and never mutated;
``to_producer`` hands a copy of its content to a new producer for
re-serialization.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence

from jwsjson.jws import verify as engine
from jwsjson.jws.encoding import b64url_decode, b64url_decode_text
from jwsjson.jws.entry import SignatureEntry
from jwsjson.jws.exceptions import JwsError
from jwsjson.jws.verifiers import (
    SignatureVerifier,
    hmac_verifier,
    public_key_verifier,
    verifier_from_jwk,
)

if TYPE_CHECKING:
    from jwsjson.jws.producer import JwsJsonProducer

log = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class JwsJsonDocument:
    """Parsed JSON JWS.

    Attributes:
        signed_document: Raw input text, kept for provenance only.
        encoded_payload: Base64url payload (embedded or detached).
        signature_entries: Entries in document order; never empty.
        is_detached: True when the payload was supplied out-of-band.
    """
    signed_document: str
    encoded_payload: str
    signature_entries: tuple[SignatureEntry, ...]
    is_detached: bool = False

    @classmethod
    def from_json(cls, signed_document: str, detached_payload: Optional[str] = None) -> "JwsJsonDocument":
        """Parse ``signed_document``; see ``parse_jws_json``."""
        from jwsjson.jws.parser import parse_jws_json
        return parse_jws_json(signed_document, detached_payload)

    # -------------------------------------------------------------------------
    # Payload access
    # -------------------------------------------------------------------------

    @property
    def decoded_payload(self) -> str:
        """Payload decoded from base64url as UTF-8 text."""
        return b64url_decode_text(self.encoded_payload)

    @property
    def decoded_payload_bytes(self) -> bytes:
        return b64url_decode(self.encoded_payload, "payload")

    def signature_entry_map(self) -> dict[str, tuple[SignatureEntry, ...]]:
        """Entries grouped by algorithm (recomputed on every call)."""
        return engine.signature_entry_map(self.signature_entries)

    # -------------------------------------------------------------------------
    # Verification
    # -------------------------------------------------------------------------

    def verify_with(self, verifier: SignatureVerifier) -> bool:
        """True when some entry of ``verifier.algorithm`` validates."""
        return engine.verify_with(self.signature_entries, verifier)

    def verify_with_hmac_key(self, key: bytes, algorithm: str) -> bool:
        """Verify with a shared secret; malformed keys yield False."""
        try:
            verifier = hmac_verifier(key, algorithm)
        except JwsError as e:
            log.warning(f"cannot build HMAC verifier: {e.message}", extra={"code": e.code})
            return False
        return self.verify_with(verifier)

    def verify_with_public_key(self, key: Any, algorithm: Optional[str] = None) -> bool:
        """Verify with a public key; malformed keys yield False."""
        try:
            verifier = public_key_verifier(key, algorithm)
        except JwsError as e:
            log.warning(f"cannot build public key verifier: {e.message}", extra={"code": e.code})
            return False
        return self.verify_with(verifier)

    def verify_with_jwk(self, jwk: Mapping[str, Any], algorithm: Optional[str] = None) -> bool:
        """Verify with a JWK; malformed keys yield False."""
        try:
            verifier = verifier_from_jwk(jwk, algorithm)
        except JwsError as e:
            log.warning(f"cannot build JWK verifier: {e.message}", extra={"code": e.code})
            return False
        return self.verify_with(verifier)

    def verify_and_get_non_validated(
        self, verifiers: Sequence[SignatureVerifier]
    ) -> tuple[SignatureEntry, ...]:
        return engine.verify_and_get_non_validated(self.signature_entries, verifiers)

    def check_all_with(self, verifiers: Sequence[SignatureVerifier]) -> engine.VerificationResult:
        return engine.check_all_with(self.signature_entries, verifiers)

    def verify_all_with(self, verifiers: Sequence[SignatureVerifier]) -> bool:
        """True only when every signature was validated by a distinct verifier."""
        return engine.verify_all_with(self.signature_entries, verifiers)

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def to_producer(self) -> "JwsJsonProducer":
        """Hand the decoded payload and all entries to a new producer."""
        from jwsjson.jws.producer import JwsJsonProducer
        return JwsJsonProducer(
            self.decoded_payload_bytes,
            signature_entries=self.signature_entries,
            encoded_payload=self.encoded_payload,
        )
