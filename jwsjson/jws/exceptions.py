"""
JWS JSON consumer exceptions.
Maps parsing/verification errors to structured error codes (see ErrorCode).
"""

from dataclasses import dataclass

from jwsjson.jws.api_models import ErrorCode


class JwsError(Exception):
    """Base exception for JWS JSON processing.

    Carries an error code that maps to ErrorCode constants.
    The caller is responsible for converting this to ErrorDetail.
    """

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


class FormatError(JwsError):
    """Exception for structurally invalid JWS JSON documents or key material.

    Raised at parse time; no partial document is ever returned.
    """

    @classmethod
    def invalid_json(cls, reason: str) -> "FormatError":
        """Factory for JWS_INVALID_JSON error."""
        return cls(
            code=ErrorCode.JWS_INVALID_JSON,
            message=f"JSON JWS is not valid JSON: {reason}"
        )

    @classmethod
    def invalid_member(cls, reason: str) -> "FormatError":
        """Factory for JWS_INVALID_MEMBER error.

        Used for:
        - Members with the wrong JSON type (payload, signatures, header)
        - Array elements that are not objects
        - Flattened re-serialization of several entries
        """
        return cls(
            code=ErrorCode.JWS_INVALID_MEMBER,
            message=f"JSON JWS has an invalid member: {reason}"
        )

    @classmethod
    def payload_conflict(cls) -> "FormatError":
        """Factory for JWS_PAYLOAD_CONFLICT error."""
        return cls(
            code=ErrorCode.JWS_PAYLOAD_CONFLICT,
            message="JSON JWS includes a payload expected to be detached"
        )

    @classmethod
    def missing_payload(cls) -> "FormatError":
        """Factory for JWS_PAYLOAD_MISSING error."""
        return cls(
            code=ErrorCode.JWS_PAYLOAD_MISSING,
            message="JSON JWS has no payload"
        )

    @classmethod
    def ambiguous_signatures(cls) -> "FormatError":
        """Factory for JWS_AMBIGUOUS_SIGNATURES error."""
        return cls(
            code=ErrorCode.JWS_AMBIGUOUS_SIGNATURES,
            message="JSON JWS has a flattened 'signature' member and a 'signatures' array"
        )

    @classmethod
    def no_signatures(cls) -> "FormatError":
        """Factory for JWS_NO_SIGNATURES error."""
        return cls(
            code=ErrorCode.JWS_NO_SIGNATURES,
            message="JSON JWS has no signatures"
        )

    @classmethod
    def invalid_key(cls, reason: str) -> "FormatError":
        """Factory for JWS_INVALID_KEY error.

        Used when key material handed to a verifier factory is malformed
        (missing JWK members, wrong key type, undecodable base64url).
        """
        return cls(
            code=ErrorCode.JWS_INVALID_KEY,
            message=f"Invalid key material: {reason}"
        )


class VerificationError(JwsError):
    """Exception for verifier construction or signature checking problems.

    Never escapes the list verification entry points; those collapse it
    into a negative result.
    """

    @classmethod
    def unsupported_alg(cls, alg: str) -> "VerificationError":
        """Factory for JWS_UNSUPPORTED_ALG error."""
        return cls(
            code=ErrorCode.JWS_UNSUPPORTED_ALG,
            message=f"Unsupported signature algorithm: {alg}"
        )

    @classmethod
    def forbidden_alg(cls, alg: str) -> "VerificationError":
        """Factory for JWS_FORBIDDEN_ALG error."""
        return cls(
            code=ErrorCode.JWS_FORBIDDEN_ALG,
            message=f"Signature algorithm is not allowed: {alg}"
        )

    @classmethod
    def signature_invalid(cls, reason: str) -> "VerificationError":
        """Factory for JWS_SIG_INVALID error."""
        return cls(
            code=ErrorCode.JWS_SIG_INVALID,
            message=f"Signature verification failed: {reason}"
        )


@dataclass(frozen=True)
class VerificationIssue:
    """Why a verification call produced a negative result."""
    code: str
    message: str

    @classmethod
    def from_error(cls, error: JwsError) -> "VerificationIssue":
        return cls(code=error.code, message=error.message)
