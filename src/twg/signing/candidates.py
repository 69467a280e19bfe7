"""Candidate generation: the byte strings Teams may have signed.

The platform's signing input is not pinned down across message types, so a
received body is expanded into a fixed, ordered list of deterministic
renderings. ``exact`` is the documented method and always comes first; the
rest cover line-ending, BOM and re-serialisation drift seen in the wild.
Adding a rendering means adding a label here and a step to ``_STEPS``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from twg.logging import get_logger
from twg.signing.canonical import canonical_activity, canonicalise, parse_json
from twg.signing.errors import CandidateGenerationFailure

__all__ = [
    "MAX_CANDIDATES",
    "UTF8_BOM",
    "Candidate",
    "CandidateLabel",
    "generate_candidates",
]

log = get_logger(__name__)

UTF8_BOM = b"\xef\xbb\xbf"


class CandidateLabel(StrEnum):
    EXACT = "exact"
    TRIM_TRAILING_CRLF = "trim-trailing-crlf"
    NORMALIZE_CRLF_LF = "normalize-crlf-lf"
    REMOVE_BOM = "remove-bom"
    JSON_STRINGIFIED = "json-stringified"
    CANONICAL_ACTIVITY = "canonical-activity"
    TRIM_TRAILING_SPACE = "trim-trailing-space"
    NORMALIZE_CRLF_CR = "normalize-crlf-cr"


MAX_CANDIDATES = len(CandidateLabel)


@dataclass(frozen=True)
class Candidate:
    """One hypothesis of the signed bytes, tagged with how it was derived."""

    label: CandidateLabel
    body: bytes


# ── Steps ─────────────────────────────────────────────────
# Each step maps the received bytes to one rendering or raises
# CandidateGenerationFailure when it does not apply.


def _text(body: bytes) -> str:
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as exc:
        msg = "body is not valid UTF-8"
        raise CandidateGenerationFailure(msg) from exc


def _json_document(body: bytes) -> object:
    text = _text(body).removeprefix("\ufeff")
    try:
        return parse_json(text)
    except (ValueError, RecursionError) as exc:
        msg = "body is not a JSON document"
        raise CandidateGenerationFailure(msg) from exc


def _serialise(value: object) -> bytes:
    try:
        return canonicalise(value).encode("utf-8")
    except (ValueError, TypeError, RecursionError) as exc:
        msg = "document cannot be re-serialised"
        raise CandidateGenerationFailure(msg) from exc


def _exact(body: bytes) -> bytes:
    return body


def _trim_trailing_crlf(body: bytes) -> bytes:
    return _text(body).rstrip("\r\n").encode("utf-8")


def _normalize_crlf_lf(body: bytes) -> bytes:
    return _text(body).replace("\r\n", "\n").encode("utf-8")


def _remove_bom(body: bytes) -> bytes:
    if not body.startswith(UTF8_BOM):
        msg = "no byte-order mark"
        raise CandidateGenerationFailure(msg)
    return body[len(UTF8_BOM):]


def _json_stringified(body: bytes) -> bytes:
    return _serialise(_json_document(body))


def _canonical_activity(body: bytes) -> bytes:
    document = _json_document(body)
    if not isinstance(document, dict):
        msg = "body is not a JSON object"
        raise CandidateGenerationFailure(msg)
    reduced = canonical_activity(document)
    if reduced is None:
        msg = "body carries none of the activity fields"
        raise CandidateGenerationFailure(msg)
    return _serialise(reduced)


def _trim_trailing_space(body: bytes) -> bytes:
    return _text(body).rstrip().encode("utf-8")


def _normalize_crlf_cr(body: bytes) -> bytes:
    return _text(body).replace("\r\n", "\r").encode("utf-8")


_STEPS: tuple[tuple[CandidateLabel, Callable[[bytes], bytes]], ...] = (
    (CandidateLabel.EXACT, _exact),
    (CandidateLabel.TRIM_TRAILING_CRLF, _trim_trailing_crlf),
    (CandidateLabel.NORMALIZE_CRLF_LF, _normalize_crlf_lf),
    (CandidateLabel.REMOVE_BOM, _remove_bom),
    (CandidateLabel.JSON_STRINGIFIED, _json_stringified),
    (CandidateLabel.CANONICAL_ACTIVITY, _canonical_activity),
    (CandidateLabel.TRIM_TRAILING_SPACE, _trim_trailing_space),
    (CandidateLabel.NORMALIZE_CRLF_CR, _normalize_crlf_cr),
)


def generate_candidates(body: bytes) -> list[Candidate]:
    """Expand ``body`` into its ordered, byte-deduplicated candidates.

    The first candidate is always ``exact``. When two steps yield the same
    bytes only the earlier label is kept. Steps that do not apply are
    skipped; this function does not raise on malformed input.
    """
    body = bytes(body)
    candidates: list[Candidate] = []
    seen: set[bytes] = set()

    for label, step in _STEPS:
        try:
            rendered = step(body)
        except CandidateGenerationFailure as exc:
            log.debug("candidate_skipped", label=str(label), detail=str(exc))
            continue
        if rendered in seen:
            continue
        seen.add(rendered)
        candidates.append(Candidate(label=label, body=rendered))

    return candidates
