"""Signature entries of a JWS JSON document.

One entry per member of the ``signatures`` array (general form) or a single
entry built from the top-level object (flattened form). Every entry carries
the document's shared encoded payload so it can rebuild its own signing input.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Optional

from jwsjson.jws.encoding import b64url_decode, b64url_decode_json
from jwsjson.jws.exceptions import JwsError
from jwsjson.jws.headers import JoseHeaders

if TYPE_CHECKING:
    from jwsjson.jws.verifiers import SignatureVerifier

log = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class SignatureEntry:
    """One (protected header, unprotected header, signature) tuple.

    Entries compare by identity: two members of a ``signatures`` array with
    identical content are still two signatures.
    """
    encoded_payload: str
    encoded_signature: str
    encoded_protected_header: Optional[str] = None
    protected_header: Optional[JoseHeaders] = None
    unprotected_header: Optional[JoseHeaders] = None

    @classmethod
    def create(
        cls,
        encoded_payload: str,
        encoded_signature: str,
        encoded_protected_header: Optional[str] = None,
        unprotected_header: Optional[Mapping[str, Any]] = None,
    ) -> "SignatureEntry":
        """Build an entry, decoding the protected header.

        Raises:
            FormatError: The protected header is not base64url-encoded JSON.
        """
        protected = None
        if encoded_protected_header is not None:
            protected = JoseHeaders(b64url_decode_json(encoded_protected_header, "protected header"))
        return cls(
            encoded_payload=encoded_payload,
            encoded_signature=encoded_signature,
            encoded_protected_header=encoded_protected_header,
            protected_header=protected,
            unprotected_header=JoseHeaders(unprotected_header) if unprotected_header is not None else None,
        )

    @property
    def signing_input(self) -> str:
        """``BASE64URL(protected) || '.' || BASE64URL(payload)`` (RFC 7515 §5.2).

        An absent protected header contributes the empty string, so the
        signing input then starts with ``.``.
        """
        return f"{self.encoded_protected_header or ''}.{self.encoded_payload}"

    @property
    def signing_input_bytes(self) -> bytes:
        return self.signing_input.encode("utf-8")

    @property
    def decoded_signature(self) -> bytes:
        return b64url_decode(self.encoded_signature, "signature")

    @property
    def union_header(self) -> JoseHeaders:
        """Protected and unprotected headers merged; protected values win."""
        protected = self.protected_header or JoseHeaders()
        return protected.union(self.unprotected_header)

    @property
    def algorithm(self) -> Optional[str]:
        """Algorithm used to bucket this entry for verifier matching.

        Taken from the protected header whenever it carries ``alg``, otherwise
        from the unprotected header. None when neither yields a string.
        """
        if self.protected_header is not None and "alg" in self.protected_header:
            return self.protected_header.algorithm
        if self.unprotected_header is not None:
            return self.unprotected_header.algorithm
        return None

    @property
    def key_id(self) -> Optional[str]:
        return self.union_header.key_id

    def verify_with(self, verifier: "SignatureVerifier") -> bool:
        """Check this entry's signature with ``verifier``.

        Returns False instead of raising when the signature cannot be decoded
        or the verifier rejects its input or raises.
        """
        try:
            if verifier.verify(self.signing_input_bytes, self.decoded_signature):
                return True
        except JwsError as e:
            log.warning(f"signature entry check failed alg={self.algorithm}: {e.message}",
                        extra={"algorithm": self.algorithm, "code": e.code})
            return False
        except Exception as e:
            log.warning(f"verifier raised alg={self.algorithm}: {e!r}",
                        extra={"algorithm": self.algorithm}, exc_info=True)
            return False
        log.warning(f"invalid signature entry alg={self.algorithm} kid={self.key_id}",
                    extra={"algorithm": self.algorithm})
        return False

    def to_json_dict(self) -> dict[str, Any]:
        """Member object for the ``signatures`` array (or flattened form)."""
        result: dict[str, Any] = {}
        if self.encoded_protected_header is not None:
            result["protected"] = self.encoded_protected_header
        if self.unprotected_header is not None:
            result["header"] = self.unprotected_header.to_dict()
        result["signature"] = self.encoded_signature
        return result
