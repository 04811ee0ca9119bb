"""Verification engine: matches verifiers to signature entries.

Entries are bucketed by algorithm; a verifier only ever looks at the bucket
for its own algorithm. Three policies are offered:

- verify_with: one verifier, true when any entry of its algorithm validates
- verify_and_get_non_validated: each verifier claims at most one entry; the
  unclaimed entries are returned in document order
- verify_all_with / check_all_with: true only when that remainder is empty

The index is rebuilt on every call. Nothing here mutates the entries.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from jwsjson.jws.entry import SignatureEntry
from jwsjson.jws.exceptions import JwsError, VerificationError, VerificationIssue
from jwsjson.jws.verifiers import SignatureVerifier

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of verifying a document against a list of verifiers.

    Attributes:
        verified: True iff every entry was claimed by some verifier.
        non_validated: Entries left unclaimed, in document order.
        issue: Set when matching stopped on an error; ``verified`` is then False.
    """
    verified: bool
    non_validated: tuple[SignatureEntry, ...] = field(default_factory=tuple)
    issue: Optional[VerificationIssue] = None


def signature_entry_map(entries: Sequence[SignatureEntry]) -> dict[str, tuple[SignatureEntry, ...]]:
    """Index entries by algorithm, keeping document order inside each bucket.

    Entries with no determinable algorithm are left out.
    """
    buckets: dict[str, list[SignatureEntry]] = {}
    for entry in entries:
        alg = entry.algorithm
        if alg is None:
            continue
        buckets.setdefault(alg, []).append(entry)
    return {alg: tuple(bucket) for alg, bucket in buckets.items()}


def verify_with(entries: Sequence[SignatureEntry], verifier: SignatureVerifier) -> bool:
    """True when at least one entry of the verifier's algorithm validates."""
    for entry in signature_entry_map(entries).get(verifier.algorithm, ()):
        if entry.verify_with(verifier):
            return True
    return False


def verify_and_get_non_validated(
    entries: Sequence[SignatureEntry],
    verifiers: Sequence[SignatureVerifier],
) -> tuple[SignatureEntry, ...]:
    """Return the entries that no verifier validated.

    Verifiers are processed in list order. Each one scans its algorithm bucket
    in document order and claims the first unclaimed entry it validates, then
    stops; a verifier never claims more than one entry and a claimed entry is
    never offered to a later verifier.
    """
    index = signature_entry_map(entries)
    claimed: set[int] = set()
    for verifier in verifiers:
        for entry in index.get(verifier.algorithm, ()):
            if id(entry) in claimed:
                continue
            if entry.verify_with(verifier):
                claimed.add(id(entry))
                break
    return tuple(entry for entry in entries if id(entry) not in claimed)


def check_all_with(
    entries: Sequence[SignatureEntry],
    verifiers: Sequence[SignatureVerifier],
) -> VerificationResult:
    """Verify that every entry is accounted for by the verifier list.

    Errors raised while matching are captured in ``issue`` rather than
    propagated.
    """
    try:
        if not verifiers:
            raise VerificationError.signature_invalid("no verifiers supplied")
        non_validated = verify_and_get_non_validated(entries, verifiers)
    except JwsError as e:
        log.warning(f"JSON JWS verification aborted: {e.message}", extra={"code": e.code})
        return VerificationResult(
            verified=False,
            non_validated=tuple(entries),
            issue=VerificationIssue.from_error(e),
        )

    if non_validated:
        log.warning(
            f"JSON JWS has {len(non_validated)} of {len(entries)} signature(s) not validated"
        )
        return VerificationResult(verified=False, non_validated=non_validated)
    return VerificationResult(verified=True)


def verify_all_with(
    entries: Sequence[SignatureEntry],
    verifiers: Sequence[SignatureVerifier],
) -> bool:
    """True iff every entry was validated by a distinct verifier in the list.

    Fails closed: any error during matching yields False.
    """
    return check_all_with(entries, verifiers).verified
