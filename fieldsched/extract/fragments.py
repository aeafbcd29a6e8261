from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List
from urllib.parse import unquote

from fieldsched.ingest.schema import RawPage, RawText

# a "%" not followed by two hex digits is a malformed escape
_RE_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


@dataclass(frozen=True)
class TextFragment:
    """One positioned piece of decoded text, in layout units."""

    text: str
    x: float
    y: float
    width: float


def decode_text(encoded: str) -> str:
    """Percent-decode one run; fall back to the raw text when it cannot be decoded."""
    if not encoded:
        return encoded
    if _RE_BAD_ESCAPE.search(encoded):
        return encoded
    try:
        return unquote(encoded, errors="strict")
    except UnicodeDecodeError:
        return encoded


def fragment_from_raw(raw: RawText) -> TextFragment:
    text = "".join(decode_text(run.text) for run in raw.runs)
    return TextFragment(text=text, x=raw.x, y=raw.y, width=raw.width)


def normalize_fragments(raw_texts: Iterable[RawText]) -> List[TextFragment]:
    """Decode, drop blank fragments, order by (y, x)."""
    out: List[TextFragment] = []
    for raw in raw_texts:
        frag = fragment_from_raw(raw)
        if not frag.text.strip():
            continue
        out.append(frag)
    out.sort(key=lambda f: (f.y, f.x))
    return out


def page_fragments(page: RawPage) -> List[TextFragment]:
    return normalize_fragments(page.texts)
