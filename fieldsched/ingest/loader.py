"""
loader.py

Input side of the pipeline. Materializes the positioned-text document
either from a pdf2json-style JSON dump or directly from a PDF via PyMuPDF.
Any failure here is fatal for the run and surfaces as DocumentLoadError.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import fitz  # PyMuPDF
from pydantic import ValidationError

from fieldsched.ingest.schema import RawDocument, RawPage, RawRun, RawText

logger = logging.getLogger(__name__)

NBSP = "\u00a0"
SOFT_HYPHEN = "\u00ad"

DEFAULT_UNIT_SCALE = 16.0


class DocumentLoadError(RuntimeError):
    """The source document (JSON dump or PDF) could not be read."""


def normalize_span_text(s: str) -> str:
    if not s:
        return s
    s = s.replace(NBSP, " ").replace(SOFT_HYPHEN, "")
    return re.sub(r"[ \t]+", " ", s).strip()


def load_document(path: Path) -> RawDocument:
    """Read a pdf2json-style dump from disk."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise DocumentLoadError(f"cannot read {path}: {exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DocumentLoadError(f"invalid JSON in {path}: {exc}") from exc
    return parse_document(data, origin=str(path))


def parse_document(data: Any, origin: str = "<memory>") -> RawDocument:
    if not isinstance(data, dict):
        raise DocumentLoadError(f"{origin}: expected a JSON object at top level")
    try:
        return RawDocument.model_validate(data)
    except ValidationError as exc:
        raise DocumentLoadError(f"{origin}: not a text-fragment document: {exc}") from exc


class PDFLoader:
    """Light wrapper around PyMuPDF producing the same structure as the JSON dump."""

    def __init__(self, path: str, unit_scale: float = DEFAULT_UNIT_SCALE):
        self.path = path
        self.unit_scale = unit_scale
        try:
            self.doc = fitz.open(path)
        except Exception as exc:  # PyMuPDF raises its own FileDataError/RuntimeError
            raise DocumentLoadError(f"cannot open PDF {path}: {exc}") from exc

    def page_count(self) -> int:
        return len(self.doc)

    def get_page(self, i: int) -> fitz.Page:
        return self.doc[i]

    def close(self) -> None:
        self.doc.close()

    def _iter_spans(self, page) -> List[Dict[str, Any]]:
        spans: List[Dict[str, Any]] = []
        pd = page.get_text("dict")
        for blk in pd.get("blocks", []):
            for line in blk.get("lines", []):
                for sp in line.get("spans", []):
                    txt = normalize_span_text(sp.get("text", ""))
                    if not txt:
                        continue
                    x0, y0, x1, y1 = sp.get("bbox", (0, 0, 0, 0))
                    spans.append({"text": txt, "x0": x0, "y0": y0, "x1": x1})
        return spans

    def page_to_raw(self, page) -> RawPage:
        k = self.unit_scale
        texts = [
            RawText(
                x=sp["x0"] / k,
                y=sp["y0"] / k,
                width=(sp["x1"] - sp["x0"]) / k,
                runs=[RawRun(text=quote(sp["text"], safe=""))],
            )
            for sp in self._iter_spans(page)
        ]
        return RawPage(
            width=page.rect.width / k,
            height=page.rect.height / k,
            texts=texts,
        )

    def to_document(self) -> RawDocument:
        pages = [self.page_to_raw(self.get_page(i)) for i in range(self.page_count())]
        logger.debug("Loaded %d page(s) from %s", len(pages), self.path)
        return RawDocument(pages=pages, source_pdf_file=str(self.path))


def load_pdf(path: Path, unit_scale: Optional[float] = None) -> RawDocument:
    loader = PDFLoader(str(path), unit_scale=unit_scale or DEFAULT_UNIT_SCALE)
    try:
        return loader.to_document()
    finally:
        loader.close()


def load_any(path: Path, unit_scale: Optional[float] = None) -> RawDocument:
    """Dispatch on suffix: .pdf goes through PyMuPDF, everything else is a JSON dump."""
    path = Path(path)
    if not path.exists():
        raise DocumentLoadError(f"file not found: {path}")
    if path.suffix.lower() == ".pdf":
        return load_pdf(path, unit_scale)
    return load_document(path)
