"""Verification failure taxonomy.

These never cross the engine boundary: ``SignatureVerifier.verify`` catches
them and reports a plain ``matched=False``. The distinction exists for logs.
"""

from __future__ import annotations

__all__ = [
    "VerificationError",
    "MissingSignatureHeader",
    "MalformedSignatureEncoding",
    "NoCandidateMatched",
    "CandidateGenerationFailure",
]


class VerificationError(Exception):
    """Base class for every reason a request is unauthenticated."""

    reason = "unauthenticated"


class MissingSignatureHeader(VerificationError):
    """Authorization header absent or not of the form ``HMAC <value>``."""

    reason = "missing_signature_header"


class MalformedSignatureEncoding(VerificationError):
    """Header present but the claimed digest is not valid base64."""

    reason = "malformed_signature_encoding"


class NoCandidateMatched(VerificationError):
    """Every candidate was hashed and none matched the claim."""

    reason = "no_candidate_matched"

    def __init__(self, tried: int) -> None:
        super().__init__(f"none of {tried} candidates matched")
        self.tried = tried


class CandidateGenerationFailure(VerificationError):
    """A single transformation could not be applied to the body.

    Non-fatal: the generator drops that candidate and moves on.
    """

    reason = "candidate_generation_failure"
