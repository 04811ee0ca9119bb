"""Producer state for re-serializing a verified JSON JWS.

No signatures are computed here. A producer holds a payload plus entries that
were already signed elsewhere (typically taken over from a parsed document)
and writes them back out in general or flattened form.
"""

import json
from typing import Iterable, Optional, Union

from jwsjson.jws.encoding import b64url_encode
from jwsjson.jws.entry import SignatureEntry
from jwsjson.jws.exceptions import FormatError


class JwsJsonProducer:
    """Mutable collection of signature entries over one payload."""

    def __init__(
        self,
        payload: Union[bytes, str],
        signature_entries: Iterable[SignatureEntry] = (),
        encoded_payload: Optional[str] = None,
    ):
        """
        Args:
            payload: Decoded payload; text is encoded as UTF-8.
            signature_entries: Entries to start from (copied).
            encoded_payload: Base64url form to emit. Defaults to the
                entries' shared payload, else the unpadded encoding of
                ``payload``.
        """
        self._payload = payload.encode("utf-8") if isinstance(payload, str) else bytes(payload)
        entries = list(signature_entries)
        if encoded_payload is None:
            encoded_payload = entries[0].encoded_payload if entries else b64url_encode(self._payload)
        self._encoded_payload = encoded_payload
        self._entries: list[SignatureEntry] = []
        for entry in entries:
            self.add_signature_entry(entry)

    @property
    def payload(self) -> bytes:
        return self._payload

    @property
    def decoded_payload(self) -> str:
        return self._payload.decode("utf-8")

    @property
    def encoded_payload(self) -> str:
        return self._encoded_payload

    @property
    def signature_entries(self) -> tuple[SignatureEntry, ...]:
        return tuple(self._entries)

    def add_signature_entry(self, entry: SignatureEntry) -> None:
        """Append an already-signed entry; it must cover this payload."""
        if entry.encoded_payload != self._encoded_payload:
            raise FormatError.invalid_member("signature entry covers a different payload")
        self._entries.append(entry)

    def to_json_dict(self, flattened: bool = False, detached: bool = False) -> dict:
        """JSON object for the general (default) or flattened serialization.

        Raises:
            FormatError: No entries, or flattened output of several entries.
        """
        if not self._entries:
            raise FormatError.no_signatures()
        result: dict = {}
        if not detached:
            result["payload"] = self._encoded_payload
        if flattened:
            if len(self._entries) != 1:
                raise FormatError.invalid_member(
                    f"flattened serialization needs exactly 1 signature, have {len(self._entries)}"
                )
            result.update(self._entries[0].to_json_dict())
        else:
            result["signatures"] = [entry.to_json_dict() for entry in self._entries]
        return result

    def signed_document(self, flattened: bool = False, detached: bool = False) -> str:
        return json.dumps(self.to_json_dict(flattened=flattened, detached=detached), separators=(",", ":"))
