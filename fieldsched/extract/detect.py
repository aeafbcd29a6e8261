"""
detect.py

Field-name detection for one grouped line.

A field-name line opens one or two field blocks. The outcome is a small
tagged result (NoField | SingleField | PairedFields) so callers dispatch on
type instead of re-deriving the cardinality.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from fieldsched.extract.catalogue import VenueCatalogue, parse_field_number
from fieldsched.extract.fragments import TextFragment

logger = logging.getLogger(__name__)


# -----------------------------
# Detection results
# -----------------------------


@dataclass(frozen=True)
class NoField:
    pass


@dataclass(frozen=True)
class SingleField:
    left: TextFragment


@dataclass(frozen=True)
class PairedFields:
    left: TextFragment
    right: TextFragment
    synthesized: bool = False  # right was fabricated by synthesize_missing_sibling


Detection = Union[NoField, SingleField, PairedFields]


# -----------------------------
# Helpers
# -----------------------------


def _norm(s: str) -> str:
    return re.sub(r"\s+", " ", s).strip().upper()


def find_candidates(
    line: Sequence[TextFragment], catalogue: VenueCatalogue
) -> List[TextFragment]:
    return [f for f in line if catalogue.is_field_name(f.text)]


def find_paired_sibling(
    line: Sequence[TextFragment], candidate: TextFragment, catalogue: VenueCatalogue
) -> Optional[TextFragment]:
    """
    For '<base> <n><letter>' with letter opening a pair, look right of the
    candidate for the paired name, then for the bare paired code ('1B').
    """
    num = parse_field_number(candidate.text)
    if num is None:
        return None
    pair = catalogue.pair_letter(num.letter)
    if pair is None:
        return None

    expected_name = _norm(num.with_letter(pair))
    code_re = re.compile(
        rf"(?<![0-9A-Z]){re.escape(num.number)}{pair.upper()}(?![0-9A-Z])"
    )
    right_of = sorted(
        (f for f in line if f is not candidate and f.x > candidate.x),
        key=lambda f: f.x,
    )
    for f in right_of:
        if expected_name in _norm(f.text):
            return f
    for f in right_of:
        if code_re.search(_norm(f.text)):
            return f
    return None


def find_adjacent_sibling(
    line: Sequence[TextFragment],
    candidate: TextFragment,
    page_width: float,
    catalogue: VenueCatalogue,
) -> Optional[TextFragment]:
    """Nearest plausible label right of the candidate on the same baseline."""
    tol = catalogue.tolerances
    min_x = candidate.x + candidate.width + tol.field_detection(page_width)
    hits = [
        f
        for f in line
        if f is not candidate
        and f.x > min_x
        and abs(f.y - candidate.y) < tol.sibling_y
        and len(f.text.strip()) > tol.sibling_min_text_len
    ]
    if not hits:
        return None
    return min(hits, key=lambda f: f.x)


def synthesize_missing_sibling(
    candidate: TextFragment, catalogue: VenueCatalogue
) -> Optional[TextFragment]:
    """
    Fabricate the right-hand sibling of a field whose partner header is
    known to go missing in the source documents (e.g. '1B' next to '1A').

    Only venues with a `synthesize_sibling` entry qualify. The fragment is
    placed at the configured x offset from the candidate, same y and width.
    """
    synth = catalogue.synthesis_for(candidate.text)
    if synth is None:
        return None
    name = catalogue.sibling_name(candidate.text)
    if name is None:
        return None
    return TextFragment(
        text=name,
        x=candidate.x + synth.offset_x,
        y=candidate.y,
        width=candidate.width,
    )


# -----------------------------
# Entry point
# -----------------------------


def detect_field_names(
    line: Sequence[TextFragment],
    page_width: float,
    catalogue: VenueCatalogue,
    issues: Optional[List[str]] = None,
) -> Detection:
    candidates = find_candidates(line, catalogue)
    if not candidates:
        return NoField()

    if len(candidates) >= 2:
        ordered = sorted(candidates, key=lambda f: f.x)
        if len(ordered) > 2:
            logger.debug(
                "Ignoring extra field names: %s", [f.text for f in ordered[2:]]
            )
        return PairedFields(left=ordered[0], right=ordered[1])

    cand = candidates[0]
    right = find_paired_sibling(line, cand, catalogue)
    if right is None:
        right = find_adjacent_sibling(line, cand, page_width, catalogue)
    if right is not None:
        logger.debug("Sibling for %r: %r at x=%.2f", cand.text, right.text, right.x)
        return PairedFields(left=cand, right=right)

    synthetic = synthesize_missing_sibling(cand, catalogue)
    if synthetic is not None:
        logger.info(
            "Synthesized missing sibling %r at x=%.2f", synthetic.text, synthetic.x
        )
        return PairedFields(left=cand, right=synthetic, synthesized=True)

    if catalogue.sibling_name(cand.text) is not None:
        msg = f"No sibling found for {cand.text.strip()!r}"
        logger.warning(msg)
        if issues is not None:
            issues.append(msg)
    return SingleField(left=cand)
