from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from fieldsched.extract.catalogue import VenueCatalogue
from fieldsched.extract.detect import NoField, detect_field_names
from fieldsched.extract.fragments import page_fragments
from fieldsched.extract.header import BlockState, resolve_header
from fieldsched.extract.lines import Line, group_by_line
from fieldsched.extract.rows import GameRecord, extract_line_games
from fieldsched.ingest.schema import RawPage

logger = logging.getLogger(__name__)


def process_page_lines(
    lines: Sequence[Line],
    page_width: float,
    catalogue: VenueCatalogue,
    issues: Optional[List[str]] = None,
) -> List[GameRecord]:
    """
    Walk the lines of one page. A field-name line plus the header line under
    it replace both block slots; every other line is read as game rows for
    the blocks currently active.
    """
    games: List[GameRecord] = []
    state = BlockState()
    mid_point_x = page_width / 2.0

    i = 0
    while i < len(lines):
        line = lines[i]
        if not line:
            i += 1
            continue

        detection = detect_field_names(line, page_width, catalogue, issues)
        if not isinstance(detection, NoField):
            if i + 1 < len(lines):
                state = resolve_header(
                    detection, lines[i + 1], mid_point_x, catalogue.tolerances, issues
                )
            else:
                state = BlockState()
            logger.debug("Blocks now %s", state.phase)
            i += 2
            continue

        games.extend(extract_line_games(line, state, mid_point_x, catalogue, games))
        i += 1

    return games


def process_page(
    page: RawPage,
    catalogue: VenueCatalogue,
    issues: Optional[List[str]] = None,
) -> List[GameRecord]:
    fragments = page_fragments(page)
    lines = group_by_line(fragments, catalogue.tolerances.line_y)
    return process_page_lines(lines, page.width, catalogue, issues)
