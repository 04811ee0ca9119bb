"""Signature verifiers.

Every verifier is bound to exactly one JWA algorithm and exposes the same
two-member contract (``algorithm`` and ``verify``), whatever kind of key it
was built from:

- HmacVerifier: shared secret (HS256/384/512)
- Ed25519Verifier: raw Ed25519 public key (EdDSA), checked with libsodium
- PublicKeyVerifier: RSA (RS*/PS*) or EC (ES*) public keys via ``cryptography``

The factories ``hmac_verifier``, ``public_key_verifier`` and
``verifier_from_jwk`` pick the right class from the key material.

Note: pysodium is imported lazily inside Ed25519Verifier.verify so that
documents can be parsed and non-EdDSA signatures checked on hosts without
libsodium.
"""

import hashlib
import hmac
from typing import Any, Mapping, Optional, Protocol, Union, runtime_checkable

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature

from jwsjson.core.config import (
    ALLOWED_ALGORITHMS,
    EC_ALGORITHMS,
    EC_CURVE_ALGORITHMS,
    EDDSA_ALGORITHMS,
    FORBIDDEN_ALGORITHMS,
    HMAC_ALGORITHMS,
    MIN_HMAC_KEY_BYTES,
    RSA_ALGORITHMS,
    RSA_PSS_ALGORITHMS,
)
from jwsjson.jws.encoding import b64url_decode
from jwsjson.jws.exceptions import FormatError, JwsError, VerificationError

ED25519_PUBLIC_KEY_BYTES = 32

_HMAC_DIGESTS = {
    "HS256": hashlib.sha256,
    "HS384": hashlib.sha384,
    "HS512": hashlib.sha512,
}

_SHA2 = {
    "256": hashes.SHA256,
    "384": hashes.SHA384,
    "512": hashes.SHA512,
}

# cryptography curve name → JWK "crv"
_CURVE_NAMES = {
    "secp256r1": "P-256",
    "secp384r1": "P-384",
    "secp521r1": "P-521",
}

_JWK_CURVES = {
    "P-256": ec.SECP256R1,
    "P-384": ec.SECP384R1,
    "P-521": ec.SECP521R1,
}


@runtime_checkable
class SignatureVerifier(Protocol):
    """Checks signatures for one algorithm."""

    algorithm: str

    def verify(self, signing_input: bytes, signature: bytes) -> bool:
        ...


def _check_algorithm(alg: Optional[str], family: frozenset[str]) -> str:
    """Validate ``alg`` against the key family and the allow-list."""
    if not alg:
        raise FormatError.invalid_key("no signature algorithm given for key")
    if alg in FORBIDDEN_ALGORITHMS:
        raise VerificationError.forbidden_alg(alg)
    if alg not in family:
        raise VerificationError.unsupported_alg(alg)
    if alg not in ALLOWED_ALGORITHMS:
        raise VerificationError.forbidden_alg(alg)
    return alg


class HmacVerifier:
    """HMAC-SHA2 verifier over a shared secret."""

    def __init__(self, key: bytes, algorithm: str = "HS256"):
        self.algorithm = _check_algorithm(algorithm, HMAC_ALGORITHMS)
        if not isinstance(key, (bytes, bytearray)) or not key:
            raise FormatError.invalid_key("HMAC key must be non-empty bytes")
        if MIN_HMAC_KEY_BYTES and len(key) < MIN_HMAC_KEY_BYTES:
            raise FormatError.invalid_key(
                f"HMAC key has {len(key)} bytes, minimum is {MIN_HMAC_KEY_BYTES}"
            )
        self._key = bytes(key)
        self._digest = _HMAC_DIGESTS[self.algorithm]

    def verify(self, signing_input: bytes, signature: bytes) -> bool:
        expected = hmac.new(self._key, signing_input, self._digest).digest()
        return hmac.compare_digest(expected, signature)

    def __repr__(self) -> str:
        return f"HmacVerifier(algorithm={self.algorithm!r})"


class Ed25519Verifier:
    """EdDSA verifier for a raw 32-byte Ed25519 public key."""

    def __init__(self, public_key: bytes, algorithm: str = "EdDSA"):
        self.algorithm = _check_algorithm(algorithm, EDDSA_ALGORITHMS)
        if not isinstance(public_key, (bytes, bytearray)) or len(public_key) != ED25519_PUBLIC_KEY_BYTES:
            raise FormatError.invalid_key(
                f"Ed25519 public key must be {ED25519_PUBLIC_KEY_BYTES} bytes"
            )
        self._public_key = bytes(public_key)

    def verify(self, signing_input: bytes, signature: bytes) -> bool:
        import pysodium
        try:
            # raises ValueError on a bad signature or wrong signature length
            pysodium.crypto_sign_verify_detached(signature, signing_input, self._public_key)
        except ValueError:
            return False
        return True

    def __repr__(self) -> str:
        return f"Ed25519Verifier(algorithm={self.algorithm!r})"


class PublicKeyVerifier:
    """RSA or ECDSA verifier backed by a ``cryptography`` public key."""

    def __init__(
        self,
        public_key: Union[rsa.RSAPublicKey, ec.EllipticCurvePublicKey],
        algorithm: str,
    ):
        if isinstance(public_key, rsa.RSAPublicKey):
            self.algorithm = _check_algorithm(algorithm, RSA_ALGORITHMS | RSA_PSS_ALGORITHMS)
        elif isinstance(public_key, ec.EllipticCurvePublicKey):
            self.algorithm = _check_algorithm(algorithm, EC_ALGORITHMS)
            crv = _CURVE_NAMES.get(public_key.curve.name)
            if EC_CURVE_ALGORITHMS.get(crv) != self.algorithm:
                raise FormatError.invalid_key(
                    f"curve {public_key.curve.name} cannot be used with {self.algorithm}"
                )
        else:
            raise FormatError.invalid_key(f"unsupported public key type {type(public_key).__name__}")
        self._public_key = public_key
        self._hash = _SHA2[self.algorithm[2:]]

    def verify(self, signing_input: bytes, signature: bytes) -> bool:
        try:
            if isinstance(self._public_key, ec.EllipticCurvePublicKey):
                der = self._raw_to_der(signature)
                if der is None:
                    return False
                self._public_key.verify(der, signing_input, ec.ECDSA(self._hash()))
            elif self.algorithm in RSA_PSS_ALGORITHMS:
                self._public_key.verify(
                    signature,
                    signing_input,
                    padding.PSS(mgf=padding.MGF1(self._hash()), salt_length=self._hash.digest_size),
                    self._hash(),
                )
            else:
                self._public_key.verify(signature, signing_input, padding.PKCS1v15(), self._hash())
        except InvalidSignature:
            return False
        return True

    def _raw_to_der(self, signature: bytes) -> Optional[bytes]:
        """JWS carries ECDSA signatures as fixed-width R || S (RFC 7518 §3.4)."""
        size = (self._public_key.curve.key_size + 7) // 8
        if len(signature) != 2 * size:
            return None
        r = int.from_bytes(signature[:size], "big")
        s = int.from_bytes(signature[size:], "big")
        return encode_dss_signature(r, s)

    def __repr__(self) -> str:
        return f"PublicKeyVerifier(algorithm={self.algorithm!r})"


# =============================================================================
# Factories
# =============================================================================

def hmac_verifier(key: bytes, algorithm: str) -> HmacVerifier:
    """Build a verifier from a raw shared secret."""
    return HmacVerifier(key, algorithm)


def public_key_verifier(key: Any, algorithm: Optional[str] = None) -> SignatureVerifier:
    """Build a verifier from a public key.

    Args:
        key: ``cryptography`` RSA/EC/Ed25519 public key, or raw 32-byte
            Ed25519 public key bytes.
        algorithm: JWA algorithm. Optional for Ed25519 (EdDSA) and EC keys
            (derived from the curve); required for RSA.

    Raises:
        FormatError: Key material is malformed or of an unsupported type.
        VerificationError: Algorithm is unsupported for the key or not allowed.
    """
    if isinstance(key, ed25519.Ed25519PublicKey):
        raw = key.public_bytes(serialization.Encoding.Raw, serialization.PublicFormat.Raw)
        return Ed25519Verifier(raw, algorithm or "EdDSA")
    if isinstance(key, (bytes, bytearray)):
        return Ed25519Verifier(key, algorithm or "EdDSA")
    if isinstance(key, ec.EllipticCurvePublicKey) and algorithm is None:
        algorithm = EC_CURVE_ALGORITHMS.get(_CURVE_NAMES.get(key.curve.name, ""))
    return PublicKeyVerifier(key, algorithm)


def _jwk_bytes(jwk: Mapping[str, Any], member: str) -> bytes:
    value = jwk.get(member)
    if not isinstance(value, str) or not value:
        raise FormatError.invalid_key(f"JWK missing required member: {member}")
    try:
        return b64url_decode(value, f"JWK {member}")
    except JwsError as e:
        raise FormatError.invalid_key(e.message)


def _jwk_int(jwk: Mapping[str, Any], member: str) -> int:
    return int.from_bytes(_jwk_bytes(jwk, member), "big")


def verifier_from_jwk(jwk: Mapping[str, Any], algorithm: Optional[str] = None) -> SignatureVerifier:
    """Build a verifier from a JSON Web Key (RFC 7517).

    The algorithm comes from ``algorithm`` when given, otherwise from the
    JWK's ``alg`` member, otherwise from the key type (EdDSA for OKP, the
    curve's ES* algorithm for EC). RSA and oct keys need an explicit one.

    Raises:
        FormatError: JWK is malformed, not a signature key, or its ``alg``
            conflicts with ``algorithm``.
        VerificationError: Algorithm is unsupported for the key or not allowed.
    """
    if not isinstance(jwk, Mapping):
        raise FormatError.invalid_key("JWK must be a JSON object")

    use = jwk.get("use")
    if use is not None and use != "sig":
        raise FormatError.invalid_key(f"JWK use is '{use}', expected 'sig'")

    jwk_alg = jwk.get("alg")
    if algorithm and isinstance(jwk_alg, str) and jwk_alg != algorithm:
        raise FormatError.invalid_key(
            f"JWK alg '{jwk_alg}' does not match requested algorithm '{algorithm}'"
        )
    alg = algorithm or (jwk_alg if isinstance(jwk_alg, str) else None)

    kty = jwk.get("kty")
    if kty == "oct":
        return HmacVerifier(_jwk_bytes(jwk, "k"), alg)

    if kty == "RSA":
        try:
            key = rsa.RSAPublicNumbers(_jwk_int(jwk, "e"), _jwk_int(jwk, "n")).public_key()
        except ValueError as e:
            raise FormatError.invalid_key(f"invalid RSA JWK: {e}")
        return PublicKeyVerifier(key, alg)

    if kty == "EC":
        crv = jwk.get("crv")
        if crv not in _JWK_CURVES:
            raise FormatError.invalid_key(f"unsupported EC curve: {crv}")
        try:
            key = ec.EllipticCurvePublicNumbers(
                _jwk_int(jwk, "x"), _jwk_int(jwk, "y"), _JWK_CURVES[crv]()
            ).public_key()
        except ValueError as e:
            raise FormatError.invalid_key(f"invalid EC JWK: {e}")
        return PublicKeyVerifier(key, alg or EC_CURVE_ALGORITHMS[crv])

    if kty == "OKP":
        crv = jwk.get("crv")
        if crv != "Ed25519":
            raise FormatError.invalid_key(f"unsupported OKP curve: {crv}")
        return Ed25519Verifier(_jwk_bytes(jwk, "x"), alg or "EdDSA")

    raise FormatError.invalid_key(f"unsupported JWK kty: {kty}")
