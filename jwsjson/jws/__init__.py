"""JWS JSON Serialization consumer.

Parses flattened and general JSON JWS documents and verifies their
signatures against caller-supplied verifiers.

Usage:
    from jwsjson.jws import parse_jws_json, verifier_from_jwk

    document = parse_jws_json(text)
    if document.verify_all_with([verifier_from_jwk(jwk) for jwk in keys]):
        ...
"""

from .exceptions import (
    JwsError,
    FormatError,
    VerificationError,
    VerificationIssue,
)
from .headers import JoseHeaders
from .entry import SignatureEntry
from .document import JwsJsonDocument
from .parser import parse_jws_json
from .producer import JwsJsonProducer
from .verifiers import (
    SignatureVerifier,
    HmacVerifier,
    Ed25519Verifier,
    PublicKeyVerifier,
    hmac_verifier,
    public_key_verifier,
    verifier_from_jwk,
)
from .verify import (
    VerificationResult,
    signature_entry_map,
    verify_with,
    verify_and_get_non_validated,
    check_all_with,
    verify_all_with,
)

__all__ = [
    # Exceptions
    "JwsError",
    "FormatError",
    "VerificationError",
    "VerificationIssue",
    # Model
    "JoseHeaders",
    "SignatureEntry",
    "JwsJsonDocument",
    "parse_jws_json",
    "JwsJsonProducer",
    # Verifiers
    "SignatureVerifier",
    "HmacVerifier",
    "Ed25519Verifier",
    "PublicKeyVerifier",
    "hmac_verifier",
    "public_key_verifier",
    "verifier_from_jwk",
    # Engine
    "VerificationResult",
    "signature_entry_map",
    "verify_with",
    "verify_and_get_non_validated",
    "check_all_with",
    "verify_all_with",
]
