from __future__ import annotations

from typing import List, Sequence

from fieldsched.extract.fragments import TextFragment

Line = List[TextFragment]

DEFAULT_Y_TOLERANCE = 0.15


def group_by_line(
    fragments: Sequence[TextFragment], y_tolerance: float = DEFAULT_Y_TOLERANCE
) -> List[Line]:
    """
    Group fragments (already sorted by (y, x)) into horizontal lines.

    The tolerance is anchored to the first fragment of the current line, not
    to a running average: drift never accumulates into one tall line, but it
    also cannot be corrected mid-line. Each line comes back sorted left->right.
    """
    if not fragments:
        return []
    lines: List[Line] = []
    current: Line = [fragments[0]]
    for frag in fragments[1:]:
        if abs(frag.y - current[0].y) < y_tolerance:
            current.append(frag)
        else:
            lines.append(sorted(current, key=lambda f: f.x))
            current = [frag]
    lines.append(sorted(current, key=lambda f: f.x))
    return lines


def line_text(line: Sequence[TextFragment]) -> str:
    return " || ".join(f.text for f in line)
