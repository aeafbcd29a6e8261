from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from fieldsched.extract.catalogue import Tolerances
from fieldsched.extract.detect import Detection, NoField, PairedFields, SingleField
from fieldsched.extract.fragments import TextFragment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldBlock:
    """Header context governing the game rows below one field name."""

    name: str
    game_duration: str
    game_type: str
    year: str
    start_x: float


@dataclass
class BlockState:
    """The two block slots of one page pass."""

    left: Optional[FieldBlock] = None
    right: Optional[FieldBlock] = None

    @property
    def phase(self) -> str:
        if self.left and self.right:
            return "left-and-right"
        if self.left:
            return "left-only"
        if self.right:
            return "right-only"
        return "no-block"


def _build_block(
    field_el: TextFragment,
    header: List[TextFragment],
    side: str,
    tol: Tolerances,
    issues: Optional[List[str]],
) -> Optional[FieldBlock]:
    need = tol.header_fields
    if len(header) < need:
        msg = (
            f"Not enough {side} header elements for {field_el.text.strip()!r} "
            f"(found {len(header)}, need {need})"
        )
        logger.warning(msg)
        if issues is not None:
            issues.append(msg)
        return None
    block = FieldBlock(
        name=field_el.text.strip(),
        game_duration=header[0].text.strip(),
        game_type=header[1].text.strip(),
        year=header[2].text.strip(),
        start_x=field_el.x,
    )
    logger.debug(
        "New %s block %s (startX %.2f): %s | %s | %s",
        side,
        block.name,
        block.start_x,
        block.game_duration,
        block.game_type,
        block.year,
    )
    return block


def resolve_header(
    detection: Detection,
    header_line: Sequence[TextFragment],
    mid_point_x: float,
    tol: Tolerances,
    issues: Optional[List[str]] = None,
) -> BlockState:
    """
    Read the line under a field-name line as (duration, type, year) for the
    left and/or right field. A side with fewer than three header fragments
    stays empty until the next field-name line.
    """
    if isinstance(detection, NoField):
        return BlockState()
    if isinstance(detection, SingleField):
        left_el, right_el = detection.left, None
    elif isinstance(detection, PairedFields):
        left_el, right_el = detection.left, detection.right
    else:
        raise TypeError(f"unexpected detection result: {detection!r}")

    left_header = sorted((f for f in header_line if f.x < mid_point_x), key=lambda f: f.x)
    if right_el is not None:
        right_cut = right_el.x - tol.right_block
    else:
        right_cut = mid_point_x
    right_header = sorted((f for f in header_line if f.x >= right_cut), key=lambda f: f.x)

    state = BlockState()
    state.left = _build_block(left_el, left_header, "left", tol, issues)
    if right_el is not None:
        state.right = _build_block(right_el, right_header, "right", tol, issues)
    return state
