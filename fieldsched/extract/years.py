from __future__ import annotations

from typing import Optional, Sequence

from fieldsched.extract.catalogue import YearMarker


def infer_year(
    team1: Optional[str], team2: Optional[str], markers: Sequence[YearMarker]
) -> Optional[str]:
    """Category label of the first marker found in a team name, else None."""
    for team in (team1, team2):
        if not team or not team.strip():
            continue
        for m in markers:
            if m.marker in team:
                return m.label
    return None
