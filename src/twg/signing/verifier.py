"""Signature verification engine for Teams outgoing webhooks."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from twg.logging import get_logger
from twg.signing.candidates import Candidate, CandidateLabel, generate_candidates
from twg.signing.comparator import constant_time_equals
from twg.signing.errors import NoCandidateMatched, VerificationError
from twg.signing.hmac import compute_digest, parse_signature_header
from twg.signing.keys import SecretKey, decode_secret
from twg.signing.models import RawRequest, SignatureClaim, VerificationOutcome

if TYPE_CHECKING:
    from twg.settings import Settings

__all__ = ["CandidateSource", "SignatureVerifier"]

log = get_logger(__name__)

CandidateSource = Callable[[bytes], Sequence[Candidate]]


class SignatureVerifier:
    """Decide whether a webhook call was signed with the shared secret.

    Built once per process. Holds only the immutable key, so ``verify``
    can run concurrently from any number of requests without locking.

    Args:
        key: Decoded HMAC key.
        evaluate_all: Hash and compare every candidate even after a match,
            so response time does not reveal which rendering matched.
        candidate_source: Expands a body into candidates. Injectable for tests.
    """

    def __init__(
        self,
        key: SecretKey,
        *,
        evaluate_all: bool = True,
        candidate_source: CandidateSource = generate_candidates,
    ) -> None:
        self._key = key
        self._evaluate_all = evaluate_all
        self._candidate_source = candidate_source

    @classmethod
    def from_settings(cls, settings: Settings) -> SignatureVerifier:
        """Build from configuration.

        Raises:
            SecretKeyError: no usable secret configured (fatal at startup).
        """
        key = decode_secret(settings.shared_secret, settings.secret_encoding)
        return cls(key, evaluate_all=settings.evaluate_all_candidates)

    @property
    def evaluate_all(self) -> bool:
        return self._evaluate_all

    def verify(self, request: RawRequest) -> VerificationOutcome:
        """Verify one request. Never raises; every failure is ``matched=False``."""
        body_length = len(request.body) if isinstance(request.body, (bytes, bytearray)) else 0
        try:
            claim = parse_signature_header(request.signature_header)
            label = self._match(request.body, claim)
        except VerificationError as exc:
            log.info("signature_rejected", reason=exc.reason, body_length=body_length)
            return VerificationOutcome.rejected()
        except Exception:
            log.exception("signature_verification_error")
            return VerificationOutcome.rejected()

        log.info("signature_accepted", variant=str(label))
        return VerificationOutcome.accepted(label)

    # ── internals ─────────────────────────────────────────

    def _candidates(self, body: bytes) -> Sequence[Candidate]:
        try:
            candidates = self._candidate_source(body)
        except Exception:
            log.warning("candidate_generation_failed", exc_info=True)
            candidates = ()
        if not candidates:
            return (Candidate(label=CandidateLabel.EXACT, body=bytes(body)),)
        return candidates

    def _digest(self, candidate: Candidate) -> bytes | None:
        try:
            return compute_digest(self._key, candidate.body)
        except Exception:
            log.warning("candidate_hash_failed", label=str(candidate.label), exc_info=True)
            return None

    def _match(self, body: bytes, claim: SignatureClaim) -> CandidateLabel:
        """Return the label of the first matching candidate.

        Raises:
            NoCandidateMatched: no candidate authenticates the claim.
        """
        candidates = self._candidates(body)
        matched: CandidateLabel | None = None

        for candidate in candidates:
            digest = self._digest(candidate)
            if digest is None:
                continue
            is_match = constant_time_equals(digest, claim.digest)
            if is_match and matched is None:
                matched = candidate.label
                if not self._evaluate_all:
                    break

        if matched is None:
            raise NoCandidateMatched(len(candidates))
        return matched
