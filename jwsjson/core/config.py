"""
JWS JSON consumer configuration constants.
Algorithm names follow RFC 7518 (JWA).

Constants are organized into:
- NORMATIVE: Fixed by RFC 7515/7518, cannot be changed
- CONFIGURABLE: Defaults that may be overridden by deployment policy
- OPERATIONAL: Deployment-specific settings (env vars)
"""

import os

# =============================================================================
# NORMATIVE CONSTANTS (fixed by RFC 7518)
# =============================================================================

# HMAC with SHA-2, RFC 7518 §3.2
HMAC_ALGORITHMS: frozenset[str] = frozenset({"HS256", "HS384", "HS512"})

# RSASSA-PKCS1-v1_5, RFC 7518 §3.3
RSA_ALGORITHMS: frozenset[str] = frozenset({"RS256", "RS384", "RS512"})

# RSASSA-PSS, RFC 7518 §3.5
RSA_PSS_ALGORITHMS: frozenset[str] = frozenset({"PS256", "PS384", "PS512"})

# ECDSA, RFC 7518 §3.4
EC_ALGORITHMS: frozenset[str] = frozenset({"ES256", "ES384", "ES512"})

# EdDSA (Ed25519 only), RFC 8037 §3.1
EDDSA_ALGORITHMS: frozenset[str] = frozenset({"EdDSA"})

# JWK "crv" → ECDSA algorithm. RFC 7518 §3.4 binds each algorithm to one curve.
EC_CURVE_ALGORITHMS: dict[str, str] = {
    "P-256": "ES256",
    "P-384": "ES384",
    "P-521": "ES512",
}

SUPPORTED_ALGORITHMS: frozenset[str] = (
    HMAC_ALGORITHMS | RSA_ALGORITHMS | RSA_PSS_ALGORITHMS | EC_ALGORITHMS | EDDSA_ALGORITHMS
)

# "none" is never accepted, whatever the allow-list says (RFC 7518 §3.6)
FORBIDDEN_ALGORITHMS: frozenset[str] = frozenset({"none"})

# =============================================================================
# CONFIGURABLE DEFAULTS (may be overridden by deployment policy)
# =============================================================================


def _parse_allowed_algorithms() -> frozenset[str]:
    """Parse comma-separated allowed algorithms from environment.

    Environment variable format:
        JWS_ALLOWED_ALGORITHMS=EdDSA,ES256

    Unknown names are ignored. Empty or unset means every supported algorithm.

    Returns:
        frozenset of allowed algorithm names.
    """
    env_value = os.getenv("JWS_ALLOWED_ALGORITHMS", "")
    if env_value:
        requested = frozenset(a.strip() for a in env_value.split(",") if a.strip())
        return (requested & SUPPORTED_ALGORITHMS) - FORBIDDEN_ALGORITHMS
    return SUPPORTED_ALGORITHMS


# Algorithms a verifier may be constructed for
ALLOWED_ALGORITHMS: frozenset[str] = _parse_allowed_algorithms()

# Minimum HMAC key length in bytes (0 disables the check).
# RFC 7518 §3.2 requires keys at least as long as the hash output; deployments
# verifying legacy tokens with short secrets may leave this at 0.
MIN_HMAC_KEY_BYTES: int = int(os.getenv("JWS_MIN_HMAC_KEY_BYTES", "0"))

# =============================================================================
# OPERATIONAL SETTINGS (deployment-specific, via environment variables)
# =============================================================================

# Admin endpoint visibility
# Default: True for dev, set to False in production deployments
ADMIN_ENDPOINT_ENABLED: bool = os.getenv("ADMIN_ENDPOINT_ENABLED", "true").lower() == "true"

# Log settings consumed by jwsjson.logging_config
LOG_LEVEL: str = os.getenv("JWS_LOG_LEVEL", "INFO").upper()
LOG_FILE: str = os.getenv("JWS_LOG_FILE", "")
