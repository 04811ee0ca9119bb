"""
JWS JSON consumer API models.
Request/response schemas for the verification service and the error code registry.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# =============================================================================
# Error Models
# =============================================================================

class ErrorDetail(BaseModel):
    """Structured error reported to service callers."""
    code: str
    message: str
    recoverable: bool


class ErrorCode:
    """Error code registry."""
    # Format layer (parse time, fatal)
    JWS_INVALID_JSON = "JWS_INVALID_JSON"
    JWS_INVALID_MEMBER = "JWS_INVALID_MEMBER"
    JWS_PAYLOAD_CONFLICT = "JWS_PAYLOAD_CONFLICT"
    JWS_PAYLOAD_MISSING = "JWS_PAYLOAD_MISSING"
    JWS_AMBIGUOUS_SIGNATURES = "JWS_AMBIGUOUS_SIGNATURES"
    JWS_NO_SIGNATURES = "JWS_NO_SIGNATURES"

    # Key layer
    JWS_INVALID_KEY = "JWS_INVALID_KEY"
    JWS_UNSUPPORTED_ALG = "JWS_UNSUPPORTED_ALG"
    JWS_FORBIDDEN_ALG = "JWS_FORBIDDEN_ALG"

    # Crypto layer
    JWS_SIG_INVALID = "JWS_SIG_INVALID"

    # Service layer
    INTERNAL_ERROR = "INTERNAL_ERROR"


# Recoverability mapping: a recoverable error may succeed with other input
# (another key, another request); format errors never will.
ERROR_RECOVERABILITY: Dict[str, bool] = {
    ErrorCode.JWS_INVALID_JSON: False,
    ErrorCode.JWS_INVALID_MEMBER: False,
    ErrorCode.JWS_PAYLOAD_CONFLICT: False,
    ErrorCode.JWS_PAYLOAD_MISSING: False,
    ErrorCode.JWS_AMBIGUOUS_SIGNATURES: False,
    ErrorCode.JWS_NO_SIGNATURES: False,
    ErrorCode.JWS_INVALID_KEY: True,
    ErrorCode.JWS_UNSUPPORTED_ALG: True,
    ErrorCode.JWS_FORBIDDEN_ALG: True,
    ErrorCode.JWS_SIG_INVALID: False,
    ErrorCode.INTERNAL_ERROR: True,
}


# =============================================================================
# Request Models
# =============================================================================

class VerifyRequest(BaseModel):
    """Request body for /verify.

    ``keys`` are JWKs; ``algorithms`` optionally pins the algorithm for the
    key at the same position (``null`` falls back to the JWK's own ``alg``).
    """
    document: str
    detached_payload: Optional[str] = None
    keys: List[Dict[str, Any]] = Field(default_factory=list)
    algorithms: Optional[List[Optional[str]]] = None


# =============================================================================
# Response Models
# =============================================================================

class VerifyResponse(BaseModel):
    """Response schema for /verify."""
    verified: bool
    signature_count: int
    algorithms: List[Optional[str]] = Field(default_factory=list)
    non_validated: List[int] = Field(default_factory=list)
    errors: Optional[List[ErrorDetail]] = None
