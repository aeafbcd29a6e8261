"""
rows.py

Game-row extraction for lines below a field header.

Each line is split between the active left/right blocks by x-range; a block
yields a game when its first fragment is a time range. Rows of a paired
sibling field (1A/1B) are re-owned by coordinate, and a 1A time slot with no
1B counterpart gets a synthesized 1B row.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from fieldsched.extract.catalogue import Tolerances, VenueCatalogue
from fieldsched.extract.fragments import TextFragment
from fieldsched.extract.header import BlockState, FieldBlock
from fieldsched.extract.lines import line_text
from fieldsched.extract.years import infer_year

logger = logging.getLogger(__name__)

TIME_RANGE_RE = re.compile(r"\d{2}\.\d{2}\s*-\s*\d{2}\.\d{2}")


def is_time_range(text: str) -> bool:
    # whole text only: "08.30 - 08.55\n" (a decoded %0A) is not a time
    return bool(TIME_RANGE_RE.fullmatch(text or ""))


def _time_key(t: str) -> str:
    return re.sub(r"\s+", "", t)


@dataclass(frozen=True)
class GameRecord:
    field: str
    game_duration: str
    game_type: str
    year: str
    time: str
    team1: str
    team2: str


@dataclass(frozen=True)
class RowMatch:
    time: TextFragment
    team1: Optional[TextFragment] = None
    team2: Optional[TextFragment] = None

    @property
    def fragments(self) -> List[TextFragment]:
        return [f for f in (self.time, self.team1, self.team2) if f is not None]

    @property
    def team_texts(self) -> tuple:
        return (
            self.team1.text if self.team1 else "",
            self.team2.text if self.team2 else "",
        )


def match_row(fragments: Sequence[TextFragment]) -> Optional[RowMatch]:
    """Leading time range plus the next two slots as teams (time ranges never count as teams)."""
    if not fragments or not is_time_range(fragments[0].text):
        return None
    team1 = fragments[1] if len(fragments) > 1 and not is_time_range(fragments[1].text) else None
    team2 = fragments[2] if len(fragments) > 2 and not is_time_range(fragments[2].text) else None
    return RowMatch(time=fragments[0], team1=team1, team2=team2)


def left_block_fragments(
    line: Sequence[TextFragment],
    left: FieldBlock,
    right: Optional[FieldBlock],
    mid_point_x: float,
    tol: Tolerances,
) -> List[TextFragment]:
    if right is not None:
        boundary = right.start_x - tol.right_block
    else:
        boundary = mid_point_x
    return sorted((f for f in line if left.start_x <= f.x < boundary), key=lambda f: f.x)


def right_block_fragments(
    line: Sequence[TextFragment], block: FieldBlock, tol: Tolerances
) -> List[TextFragment]:
    return sorted(
        (f for f in line if f.x >= block.start_x - tol.right_block), key=lambda f: f.x
    )


def pair_midpoint(left: FieldBlock, right: FieldBlock) -> float:
    return (left.start_x + right.start_x) / 2.0


def make_record(
    block: FieldBlock, time: str, team1: str, team2: str, catalogue: VenueCatalogue
) -> GameRecord:
    inferred = infer_year(team1, team2, catalogue.year_markers)
    return GameRecord(
        field=block.name,
        game_duration=block.game_duration,
        game_type=block.game_type,
        year=inferred or block.year,
        time=time,
        team1=team1,
        team2=team2,
    )


def synthesize_sibling_row(
    line: Sequence[TextFragment],
    left: FieldBlock,
    right: FieldBlock,
    time: str,
    catalogue: VenueCatalogue,
    taken: Sequence[TextFragment] = (),
) -> GameRecord:
    """
    Right-sibling row for `time`. Teams are the fragments past the pair
    midpoint that no other row on the line has consumed.
    """
    mid = pair_midpoint(left, right)
    used = {id(f) for f in taken}
    teams = sorted(
        (
            f
            for f in line
            if f.x > mid and id(f) not in used and not is_time_range(f.text)
        ),
        key=lambda f: f.x,
    )
    team1 = teams[0].text if teams else ""
    team2 = teams[1].text if len(teams) > 1 else ""
    logger.debug(
        "Synthesized %s row %s: %s vs %s",
        right.name,
        time,
        team1 or "---",
        team2 or "---",
    )
    return make_record(right, time, team1, team2, catalogue)


def extract_line_games(
    line: Sequence[TextFragment],
    state: BlockState,
    mid_point_x: float,
    catalogue: VenueCatalogue,
    emitted: Sequence[GameRecord] = (),
) -> List[GameRecord]:
    """
    Games found on one non-header line, left block first.
    `emitted` are the records already produced on this page.
    """
    tol = catalogue.tolerances
    out: List[GameRecord] = []
    left, right = state.left, state.right

    if left is None and right is None:
        logger.debug("Orphaned line (no active blocks): %s", line_text(line))
        return out

    paired = (
        left is not None
        and right is not None
        and catalogue.is_sibling_pair(left.name, right.name)
    )

    left_row: Optional[RowMatch] = None
    right_row: Optional[RowMatch] = None
    reassigned = False
    if left is not None:
        left_row = match_row(left_block_fragments(line, left, right, mid_point_x, tol))
        if left_row is not None:
            owner = left
            if paired:
                mid = pair_midpoint(left, right)
                past = next((f for f in left_row.fragments if f.x > mid), None)
                if past is not None:
                    owner = right
                    reassigned = True
                    logger.debug(
                        "Reassigned %s -> %s: %r at x=%.2f > mid %.2f",
                        left.name,
                        right.name,
                        past.text,
                        past.x,
                        mid,
                    )
            team1, team2 = left_row.team_texts
            out.append(make_record(owner, left_row.time.text, team1, team2, catalogue))

    if right is not None and not reassigned:
        right_row = match_row(right_block_fragments(line, right, tol))
        if right_row is not None:
            team1, team2 = right_row.team_texts
            out.append(make_record(right, right_row.time.text, team1, team2, catalogue))

    if paired and left_row is not None:
        key = _time_key(left_row.time.text)
        seen = any(
            g.field == right.name and _time_key(g.time) == key
            for g in list(emitted) + out
        )
        if not seen:
            taken = left_row.fragments + (right_row.fragments if right_row else [])
            out.append(
                synthesize_sibling_row(
                    line, left, right, left_row.time.text, catalogue, taken
                )
            )

    return out
