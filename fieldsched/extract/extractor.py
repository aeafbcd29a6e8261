"""
extractor.py

Orchestrates a full document: per page normalize -> group lines -> detect
field blocks -> extract rows, plus the document date read once from page 1.

Usage:
    ex = ScheduleExtractor()
    result = ex.run(load_any(Path("schedule.pdf")))
    write_json(result, Path("schedule.games.json"))
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path, PureWindowsPath
from typing import List, Optional, Sequence

from fieldsched.extract.catalogue import VenueCatalogue, load_catalogue
from fieldsched.extract.fragments import TextFragment, page_fragments
from fieldsched.extract.page import process_page
from fieldsched.extract.rows import GameRecord
from fieldsched.extract.schema import GameEntry, ScheduleDocument
from fieldsched.ingest.loader import load_any
from fieldsched.ingest.schema import RawDocument

logger = logging.getLogger(__name__)

DATE_RE = re.compile(r"(\d{1,2}\.\d{1,2}\.\d{4})")


def extract_document_date(fragments: Sequence[TextFragment]) -> Optional[str]:
    """First D.M.YYYY / DD.MM.YYYY found in reading order."""
    for frag in fragments:
        m = DATE_RE.search(frag.text.strip())
        if m:
            logger.debug("Document date %s (from %r)", m.group(1), frag.text)
            return m.group(1)
    return None


def _basename(p: Optional[str]) -> Optional[str]:
    if not p:
        return None
    # dumps produced on Windows carry backslash paths
    return PureWindowsPath(p).name or None


@dataclass
class ExtractionResult:
    document_date: Optional[str]
    games: List[GameRecord]
    source_file: Optional[str] = None
    page_count: int = 0
    issues: List[str] = field(default_factory=list)

    def to_contract(self) -> ScheduleDocument:
        return ScheduleDocument(
            document_date=self.document_date,
            games=[GameEntry(**asdict(g)) for g in self.games],
            source_file=self.source_file,
        )


class ScheduleExtractor:
    """High-level orchestrator; one instance can process many documents."""

    def __init__(self, catalogue: Optional[VenueCatalogue] = None):
        self.catalogue = catalogue or load_catalogue()

    def run(
        self, document: RawDocument, source_file: Optional[str] = None
    ) -> ExtractionResult:
        issues: List[str] = []
        games: List[GameRecord] = []

        document_date = None
        if document.pages:
            document_date = extract_document_date(page_fragments(document.pages[0]))
        if document_date is None:
            logger.info("Document date not found on the first page")

        for i, page in enumerate(document.pages, start=1):
            page_issues: List[str] = []
            page_games = process_page(page, self.catalogue, page_issues)
            logger.debug("Page %d: %d game(s)", i, len(page_games))
            games.extend(page_games)
            issues.extend(f"page {i}: {msg}" for msg in page_issues)

        if not games:
            issues.append("No games extracted")
        logger.info("Extraction finished: %d game(s)", len(games))

        return ExtractionResult(
            document_date=document_date,
            games=games,
            source_file=_basename(source_file or document.source_pdf_file),
            page_count=len(document.pages),
            issues=issues,
        )

    def run_file(self, path: Path, unit_scale: Optional[float] = None) -> ExtractionResult:
        """Load a PDF or JSON dump and extract its games. Load errors propagate."""
        path = Path(path)
        document = load_any(path, unit_scale)
        source = document.source_pdf_file
        if source is None and path.suffix.lower() == ".pdf":
            source = str(path)
        return self.run(document, source_file=source)


def extract_file(
    path: Path,
    catalogue: Optional[VenueCatalogue] = None,
    unit_scale: Optional[float] = None,
) -> ExtractionResult:
    return ScheduleExtractor(catalogue).run_file(path, unit_scale)


def write_json(result: ExtractionResult, out_path: Path) -> Path:
    """Validate against the output contract & dump deterministically."""
    payload = result.to_contract().to_json_dict()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(
        json.dumps(payload, indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    return out_path
