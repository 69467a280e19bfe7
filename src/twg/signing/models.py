"""Value objects passed between the transport layer and the verifier."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from twg.signing.candidates import CandidateLabel

__all__ = ["RawRequest", "SignatureClaim", "VerificationOutcome"]


@dataclass(frozen=True)
class RawRequest:
    """Exact wire bytes of a webhook call plus its Authorization header."""

    body: bytes
    signature_header: str | None = None


@dataclass(frozen=True)
class SignatureClaim:
    """Digest the caller claims, decoded from ``HMAC <base64>``."""

    digest: bytes = field(repr=False)


@dataclass(frozen=True)
class VerificationOutcome:
    """Result of one verification. ``label`` is set only on a match."""

    matched: bool
    label: CandidateLabel | None = None

    @classmethod
    def rejected(cls) -> VerificationOutcome:
        return cls(matched=False)

    @classmethod
    def accepted(cls, label: CandidateLabel) -> VerificationOutcome:
        return cls(matched=True, label=label)
