"""
summary.py

Read-side views over an extracted schedule: a per-field summary grouped by
year/series, and a small data-quality report.
"""

from __future__ import annotations

import json
import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from fieldsched.extract.schema import GameEntry, ScheduleDocument

logger = logging.getLogger(__name__)

# more games than this in one (field, time) slot is suspicious
MAX_GAMES_PER_SLOT = 2


@dataclass
class YearGroup:
    game_type: str
    games: List[GameEntry] = field(default_factory=list)


@dataclass
class FieldSummary:
    field_name: str
    year_groups: Dict[str, YearGroup]


@dataclass
class ScheduleSummary:
    document_date: Optional[str]
    total_games: int
    total_fields: int
    field_summaries: List[FieldSummary]


def load_schedule(path: Path) -> ScheduleDocument:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return ScheduleDocument.model_validate(data)


def has_opponent(game: GameEntry) -> bool:
    """False only when both team slots are blank."""
    return bool(game.team1.strip() or game.team2.strip())


def start_time(game: GameEntry) -> str:
    return game.time.split("-", 1)[0].strip()


def summarize_schedule(
    doc: ScheduleDocument, remove_no_opponent: bool = False
) -> ScheduleSummary:
    games = list(doc.games)
    if remove_no_opponent:
        games = [g for g in games if has_opponent(g)]

    # first game per (field, time) wins
    by_field: Dict[str, List[GameEntry]] = defaultdict(list)
    seen = set()
    for g in games:
        key = (g.field, g.time)
        if key in seen:
            logger.debug("Skipping duplicate game for %s at %s", g.field, g.time)
            continue
        seen.add(key)
        by_field[g.field].append(g)

    summaries: List[FieldSummary] = []
    for name in sorted(by_field):
        groups: Dict[str, YearGroup] = {}
        for g in by_field[name]:
            if g.year not in groups:
                groups[g.year] = YearGroup(game_type=g.game_type)
            groups[g.year].games.append(g)
        for grp in groups.values():
            grp.games.sort(key=start_time)
        ordered = {year: groups[year] for year in sorted(groups)}
        summaries.append(FieldSummary(field_name=name, year_groups=ordered))

    return ScheduleSummary(
        document_date=doc.document_date,
        total_games=len(games),
        total_fields=len(summaries),
        field_summaries=summaries,
    )


def check_issues(doc: ScheduleDocument) -> Tuple[List[str], int]:
    """Returns (issue messages, number of games missing a team)."""
    games = doc.games
    issues: List[str] = []

    missing = sum(1 for g in games if not g.team1 or not g.team2)
    if missing:
        issues.append(f"Missing team data in {missing} game(s)")

    signatures = Counter((g.field, g.time, g.team1, g.team2) for g in games)
    duplicates = sum(n - 1 for n in signatures.values() if n > 1)
    if duplicates:
        issues.append(f"Found {duplicates} potential duplicate game(s)")

    slots = Counter((g.field, g.time) for g in games)
    crowded = [k for k, n in slots.items() if n > MAX_GAMES_PER_SLOT]
    if crowded:
        issues.append(
            f"Found {len(crowded)} time slot(s) with potentially too many games scheduled"
        )

    return issues, missing
