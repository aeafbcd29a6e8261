from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

DEFAULT_VENUES_PATH = Path(__file__).with_name("venues.yaml")

# "<base> <n><letter>", e.g. "GARAM MASALA 1A"
FIELD_NUMBER_RE = re.compile(r"^(?P<base>.+?)\s+(?P<number>\d+)(?P<letter>[A-Za-z])$")


# ---------- catalogue types ----------


@dataclass
class Tolerances:
    line_y: float = 0.15
    sibling_y: float = 0.5
    field_detect: float = 0.2
    field_detect_landscape: float = 0.5
    landscape_width: float = 100.0
    right_block: float = 0.2
    sibling_min_text_len: int = 3
    header_fields: int = 3

    def field_detection(self, page_width: float) -> float:
        if page_width > self.landscape_width:
            return self.field_detect_landscape
        return self.field_detect


@dataclass
class SiblingSynthesis:
    field_numbers: List[str]  # e.g. ["1A"]
    offset_x: float


@dataclass
class VenueEntry:
    name: str
    patterns: List[re.Pattern] = field(default_factory=list)
    contains_all: List[str] = field(default_factory=list)
    pairing: bool = False
    synthesis: Optional[SiblingSynthesis] = None

    def matches(self, text: str) -> bool:
        upper = text.strip().upper()
        if not upper:
            return False
        if any(p.search(upper) for p in self.patterns):
            return True
        return bool(self.contains_all) and all(s in upper for s in self.contains_all)


@dataclass
class YearMarker:
    marker: str
    label: str


@dataclass(frozen=True)
class FieldNumber:
    base: str
    number: str
    letter: str

    @property
    def code(self) -> str:
        return f"{self.number}{self.letter}"

    def with_letter(self, letter: str) -> str:
        return f"{self.base} {self.number}{letter}"


def parse_field_number(text: str) -> Optional[FieldNumber]:
    m = FIELD_NUMBER_RE.match(re.sub(r"\s+", " ", text or "").strip())
    if not m:
        return None
    return FieldNumber(m.group("base"), m.group("number"), m.group("letter"))


@dataclass
class VenueCatalogue:
    venues: List[VenueEntry]
    pairs: Dict[str, str] = field(default_factory=lambda: {"A": "B", "C": "D"})
    year_markers: List[YearMarker] = field(default_factory=list)
    tolerances: Tolerances = field(default_factory=Tolerances)

    def match(self, text: str) -> Optional[VenueEntry]:
        for venue in self.venues:
            if venue.matches(text):
                return venue
        return None

    def is_field_name(self, text: str) -> bool:
        return self.match(text) is not None

    def pair_letter(self, letter: str) -> Optional[str]:
        """Sibling letter for the first letter of a pair (A -> B); None otherwise."""
        pair = self.pairs.get(letter.upper())
        if pair is None:
            return None
        return pair if letter.isupper() else pair.lower()

    def sibling_name(self, name: str) -> Optional[str]:
        """Expected right-hand sibling of a pairing venue field, e.g. '... 1A' -> '... 1B'."""
        venue = self.match(name)
        if venue is None or not venue.pairing:
            return None
        num = parse_field_number(name)
        if num is None:
            return None
        pair = self.pair_letter(num.letter)
        if pair is None:
            return None
        return num.with_letter(pair)

    def is_sibling_pair(self, left_name: str, right_name: str) -> bool:
        expected = self.sibling_name(left_name)
        if expected is None:
            return False
        return _norm(expected) == _norm(right_name)

    def synthesis_for(self, name: str) -> Optional[SiblingSynthesis]:
        venue = self.match(name)
        if venue is None or venue.synthesis is None:
            return None
        num = parse_field_number(name)
        if num is None:
            return None
        wanted = {c.upper() for c in venue.synthesis.field_numbers}
        return venue.synthesis if num.code.upper() in wanted else None


def _norm(s: str) -> str:
    return re.sub(r"\s+", " ", s).strip().upper()


# ---------- loading ----------


def _venue_from_row(r: Dict[str, Any]) -> VenueEntry:
    synth = None
    raw_synth = r.get("synthesize_sibling")
    if raw_synth:
        synth = SiblingSynthesis(
            field_numbers=[str(n) for n in raw_synth.get("field_numbers", [])],
            offset_x=float(raw_synth["offset_x"]),
        )
    return VenueEntry(
        name=r["name"],
        patterns=[re.compile(p) for p in r.get("patterns", [])],
        contains_all=[s.upper() for s in r.get("contains_all", [])],
        pairing=bool(r.get("pairing", False)),
        synthesis=synth,
    )


def _tolerances_from_row(r: Optional[Dict[str, Any]]) -> Tolerances:
    if not r:
        return Tolerances()
    known = {f.name for f in fields(Tolerances)}
    unknown = set(r) - known
    if unknown:
        raise ValueError(f"unknown tolerance keys: {sorted(unknown)}")
    return Tolerances(**r)


def catalogue_from_dict(data: Dict[str, Any]) -> VenueCatalogue:
    venues = [_venue_from_row(r) for r in data.get("venues", [])]
    pairs = {str(k).upper(): str(v).upper() for k, v in (data.get("pairs") or {}).items()}
    markers = [
        YearMarker(marker=str(m["marker"]), label=str(m["label"]))
        for m in data.get("year_markers", [])
    ]
    return VenueCatalogue(
        venues=venues,
        pairs=pairs or {"A": "B", "C": "D"},
        year_markers=markers,
        tolerances=_tolerances_from_row(data.get("tolerances")),
    )


def load_catalogue(path: Optional[Path] = None) -> VenueCatalogue:
    p = Path(path) if path is not None else DEFAULT_VENUES_PATH
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    return catalogue_from_dict(data)
