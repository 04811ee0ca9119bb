"""
Unit tests for verifier-to-entry matching.

Uses stub verifiers that accept a fixed set of signature values so the
matching rules can be checked independently of any cryptography:
- single verifier (any entry of its algorithm)
- remainder computation (one claim per verifier, document order)
- all-match decision and its fail-closed behaviour
"""

import base64
import json
import logging

import pytest

from jwsjson.jws.api_models import ErrorCode
from jwsjson.jws.exceptions import FormatError, VerificationError
from jwsjson.jws.parser import parse_jws_json
from jwsjson.jws.verify import (
    VerificationResult,
    check_all_with,
    verify_all_with,
    verify_and_get_non_validated,
    verify_with,
)


# =============================================================================
# Test Helpers
# =============================================================================

def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


PAYLOAD = b64url(b"payload")


class StubVerifier:
    """Accepts exactly the listed raw signature values."""

    def __init__(self, algorithm: str, *accepts: bytes):
        self.algorithm = algorithm
        self.accepts = set(accepts)
        self.seen: list[bytes] = []

    def verify(self, signing_input: bytes, signature: bytes) -> bool:
        self.seen.append(signature)
        return signature in self.accepts


class RaisingVerifier:
    """Raises the given error from verify()."""

    def __init__(self, algorithm: str, error: Exception):
        self.algorithm = algorithm
        self.error = error

    def verify(self, signing_input: bytes, signature: bytes) -> bool:
        raise self.error


def make_document(*specs: tuple):
    """Build a general JWS; each spec is (alg or None, raw signature bytes)."""
    members = []
    for alg, sig in specs:
        member = {"signature": b64url(sig)}
        if alg is not None:
            member["protected"] = b64url(json.dumps({"alg": alg}).encode())
        members.append(member)
    return parse_jws_json(json.dumps({"payload": PAYLOAD, "signatures": members}))


# =============================================================================
# Single Verifier
# =============================================================================

class TestVerifyWith:
    """verify_with: true when any entry of the verifier's algorithm validates."""

    def test_matching_entry(self):
        doc = make_document(("HS256", b"s0"))
        assert verify_with(doc.signature_entries, StubVerifier("HS256", b"s0"))
        assert doc.verify_with(StubVerifier("HS256", b"s0"))

    def test_second_entry_of_bucket(self):
        doc = make_document(("HS256", b"s0"), ("HS256", b"s1"))
        assert doc.verify_with(StubVerifier("HS256", b"s1"))

    def test_short_circuits_on_first_success(self):
        doc = make_document(("HS256", b"s0"), ("HS256", b"s1"))
        verifier = StubVerifier("HS256", b"s0", b"s1")
        assert doc.verify_with(verifier)
        assert verifier.seen == [b"s0"]

    def test_no_bucket_for_algorithm(self):
        doc = make_document(("HS256", b"s0"))
        verifier = StubVerifier("RS256", b"s0")
        assert not doc.verify_with(verifier)
        assert verifier.seen == []

    def test_none_validate(self):
        doc = make_document(("HS256", b"s0"), ("HS256", b"s1"))
        assert not doc.verify_with(StubVerifier("HS256", b"other"))

    def test_entry_without_algorithm_never_matches(self):
        doc = make_document((None, b"s0"))
        verifier = StubVerifier("HS256", b"s0")
        assert not doc.verify_with(verifier)
        assert verifier.seen == []

    def test_verifier_error_is_false(self):
        doc = make_document(("HS256", b"s0"))
        verifier = RaisingVerifier("HS256", VerificationError.signature_invalid("boom"))
        assert not doc.verify_with(verifier)

    def test_verifier_exception_is_false(self, caplog):
        doc = make_document(("HS256", b"s0"))
        verifier = RaisingVerifier("HS256", TimeoutError("hsm timeout"))
        with caplog.at_level(logging.WARNING, logger="jwsjson"):
            assert not doc.verify_with(verifier)
        assert any("hsm timeout" in r.getMessage() for r in caplog.records)


# =============================================================================
# Remainder
# =============================================================================

class TestNonValidated:
    """verify_and_get_non_validated: one claim per verifier, document order."""

    def test_second_same_alg_entry_never_claimed(self):
        """[HS256, HS256, RS256] with one HS256 and one RS256 verifier → [entry 1]."""
        doc = make_document(("HS256", b"s0"), ("HS256", b"s1"), ("RS256", b"s2"))
        verifiers = [StubVerifier("HS256", b"s0"), StubVerifier("RS256", b"s2")]
        remainder = doc.verify_and_get_non_validated(verifiers)
        assert remainder == (doc.signature_entries[1],)
        assert not doc.verify_all_with(verifiers)

    def test_verifier_claims_at_most_one_entry(self):
        """A verifier able to validate both HS256 entries still claims only the first."""
        doc = make_document(("HS256", b"s0"), ("HS256", b"s1"))
        remainder = doc.verify_and_get_non_validated([StubVerifier("HS256", b"s0", b"s1")])
        assert remainder == (doc.signature_entries[1],)

    def test_same_entry_claimed_once(self):
        """Two verifiers validating the same single entry claim it once."""
        doc = make_document(("HS256", b"s0"))
        first = StubVerifier("HS256", b"s0")
        second = StubVerifier("HS256", b"s0")
        assert doc.verify_and_get_non_validated([first, second]) == ()
        assert second.seen == []
        assert doc.verify_all_with([first, second])

    def test_two_verifiers_two_entries(self):
        doc = make_document(("HS256", b"s0"), ("HS256", b"s1"))
        verifiers = [StubVerifier("HS256", b"s0", b"s1"), StubVerifier("HS256", b"s0", b"s1")]
        assert doc.verify_and_get_non_validated(verifiers) == ()

    def test_later_verifier_skips_claimed_entry(self):
        doc = make_document(("HS256", b"s0"), ("HS256", b"s1"))
        first = StubVerifier("HS256", b"s0")
        second = StubVerifier("HS256", b"s0", b"s1")
        assert doc.verify_and_get_non_validated([first, second]) == ()
        assert second.seen == [b"s1"]

    def test_remainder_in_document_order(self):
        doc = make_document(("RS256", b"s0"), ("HS256", b"s1"), ("ES256", b"s2"), (None, b"s3"))
        remainder = doc.verify_and_get_non_validated([StubVerifier("HS256", b"s1")])
        entries = doc.signature_entries
        assert remainder == (entries[0], entries[2], entries[3])

    def test_no_verifiers_leaves_everything(self):
        doc = make_document(("HS256", b"s0"), ("RS256", b"s1"))
        assert doc.verify_and_get_non_validated([]) == doc.signature_entries

    def test_identical_entries_counted_separately(self):
        doc = make_document(("HS256", b"s0"), ("HS256", b"s0"))
        remainder = verify_and_get_non_validated(doc.signature_entries, [StubVerifier("HS256", b"s0")])
        assert remainder == (doc.signature_entries[1],)

    def test_repeated_calls_are_independent(self):
        doc = make_document(("HS256", b"s0"), ("HS256", b"s1"))
        verifiers = [StubVerifier("HS256", b"s0")]
        first = doc.verify_and_get_non_validated(verifiers)
        second = doc.verify_and_get_non_validated(verifiers)
        assert first == second == (doc.signature_entries[1],)


# =============================================================================
# All-Match Decision
# =============================================================================

class TestVerifyAllWith:
    """verify_all_with is true iff the remainder is empty."""

    @pytest.mark.parametrize("verifiers, expected", [
        ([("HS256", b"s0"), ("RS256", b"s1")], True),
        ([("RS256", b"s1"), ("HS256", b"s0")], True),
        ([("HS256", b"s0")], False),
        ([("HS256", b"s0"), ("RS256", b"bad")], False),
        ([("HS256", b"s0"), ("RS256", b"s1"), ("ES256", b"s2")], True),
    ])
    def test_agrees_with_remainder(self, verifiers, expected):
        doc = make_document(("HS256", b"s0"), ("RS256", b"s1"))
        built = [StubVerifier(alg, sig) for alg, sig in verifiers]
        remainder = verify_and_get_non_validated(doc.signature_entries, built)
        assert verify_all_with(doc.signature_entries, built) is expected
        assert (remainder == ()) is expected

    def test_all_signatures_needed_not_any(self):
        """One validating verifier is not enough when another entry is unclaimed."""
        doc = make_document(("HS256", b"s0"), ("RS256", b"s1"))
        assert doc.verify_with(StubVerifier("HS256", b"s0"))
        assert not doc.verify_all_with([StubVerifier("HS256", b"s0")])

    def test_empty_verifier_list(self):
        doc = make_document(("HS256", b"s0"))
        result = doc.check_all_with([])
        assert not result.verified
        assert result.non_validated == doc.signature_entries
        assert result.issue is not None

    def test_fails_closed_on_error(self):
        """A JwsError escaping matching is a negative result, not an exception."""
        doc = make_document(("HS256", b"s0"))

        class BrokenEntryVerifier(StubVerifier):
            @property
            def algorithm(self):
                raise FormatError.invalid_key("cannot determine algorithm")

            @algorithm.setter
            def algorithm(self, value):
                pass

        result = check_all_with(doc.signature_entries, [BrokenEntryVerifier("HS256", b"s0")])
        assert isinstance(result, VerificationResult)
        assert not result.verified
        assert result.issue.code == ErrorCode.JWS_INVALID_KEY
        assert not verify_all_with(doc.signature_entries, [BrokenEntryVerifier("HS256", b"s0")])

    def test_verifier_timeout_is_negative_result(self):
        doc = make_document(("HS256", b"s0"))
        timing_out = RaisingVerifier("HS256", TimeoutError("hsm timeout"))
        assert not doc.verify_all_with([timing_out])
        result = doc.check_all_with([timing_out])
        assert not result.verified
        assert result.non_validated == doc.signature_entries

    def test_other_verifier_claims_after_exception(self):
        doc = make_document(("HS256", b"s0"))
        verifiers = [RaisingVerifier("HS256", OSError("device gone")), StubVerifier("HS256", b"s0")]
        assert verify_and_get_non_validated(doc.signature_entries, verifiers) == ()
        assert doc.verify_all_with(verifiers)

    def test_result_on_success(self):
        doc = make_document(("HS256", b"s0"))
        result = doc.check_all_with([StubVerifier("HS256", b"s0")])
        assert result == VerificationResult(verified=True)

    def test_failure_logged_as_warning(self, caplog):
        doc = make_document(("HS256", b"s0"), ("RS256", b"s1"))
        with caplog.at_level(logging.WARNING, logger="jwsjson"):
            assert not doc.verify_all_with([StubVerifier("HS256", b"s0")])
        assert any("not validated" in r.getMessage() for r in caplog.records)
