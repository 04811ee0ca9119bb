"""JOSE header store.

Protected and unprotected headers are kept as opaque JSON values; only a
handful of registered parameters (RFC 7515 §4.1) get typed accessors.
"""

from collections.abc import Mapping
from typing import Any, Iterator, Optional


class JoseHeaders(Mapping):
    """Read-only, insertion-ordered mapping of header name to JSON value."""

    __slots__ = ("_values",)

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._values: dict[str, Any] = dict(values or {})

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"JoseHeaders({self._values!r})"

    def _string(self, name: str) -> Optional[str]:
        value = self._values.get(name)
        return value if isinstance(value, str) else None

    @property
    def algorithm(self) -> Optional[str]:
        """The ``alg`` parameter, or None when absent or not a string."""
        return self._string("alg")

    @property
    def key_id(self) -> Optional[str]:
        return self._string("kid")

    @property
    def content_type(self) -> Optional[str]:
        return self._string("cty")

    @property
    def type(self) -> Optional[str]:
        return self._string("typ")

    @property
    def critical(self) -> tuple[str, ...]:
        crit = self._values.get("crit")
        if isinstance(crit, list):
            return tuple(c for c in crit if isinstance(c, str))
        return ()

    @property
    def b64(self) -> bool:
        """RFC 7797 ``b64`` flag; True (encoded payload) when absent."""
        return self._values.get("b64", True) is not False

    def to_dict(self) -> dict[str, Any]:
        """Return a shallow copy as a plain dict."""
        return dict(self._values)

    def union(self, other: Optional["JoseHeaders"]) -> "JoseHeaders":
        """Merge ``other`` underneath this store; keys here win on overlap."""
        merged = dict(other or {})
        merged.update(self._values)
        return JoseHeaders(merged)
