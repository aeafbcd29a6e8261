import json

import pytest

from fieldsched.ingest import loader as loader_mod
from fieldsched.ingest.loader import (
    DocumentLoadError,
    PDFLoader,
    load_any,
    load_document,
    parse_document,
)

# --- Tiny fakes to avoid real PDFs -------------------------------------------


class _FakeRect:
    def __init__(self, w=842.0, h=595.0):
        self.width = w
        self.height = h


class _FakePage:
    def __init__(self, spans):
        # spans: list[(text, (x0, y0, x1, y1))]
        self._spans = spans
        self.rect = _FakeRect()

    def get_text(self, mode):
        assert mode == "dict"
        return {
            "blocks": [
                {
                    "lines": [
                        {"spans": [{"text": t, "bbox": bbox} for t, bbox in self._spans]}
                    ]
                }
            ]
        }


class _FakeDoc:
    def __init__(self, pages):
        self._pages = pages
        self.closed = False

    def __len__(self):
        return len(self._pages)

    def __getitem__(self, i):
        return self._pages[i]

    def close(self):
        self.closed = True


def _dump(pages, **extra):
    return {"Meta": {"Title": "x"}, "Pages": pages, **extra}


# --- JSON dumps --------------------------------------------------------------


def test_load_document_reads_pdf2json_shape(tmp_path):
    p = tmp_path / "parsed.json"
    payload = _dump(
        [
            {
                "Width": 52.6,
                "Height": 37.2,
                "Fills": [],
                "Texts": [
                    {"x": 3.0, "y": 1.5, "w": 6.1, "sw": 0.3, "R": [{"T": "GARAM%20MASALA%201A", "S": -1}]}
                ],
            }
        ],
        sourcePdfFile="uploads/schedule.pdf",
    )
    p.write_text(json.dumps(payload), encoding="utf-8")

    doc = load_document(p)

    assert doc.source_pdf_file == "uploads/schedule.pdf"
    assert len(doc.pages) == 1
    page = doc.pages[0]
    assert page.width == pytest.approx(52.6)
    t = page.texts[0]
    assert (t.x, t.y, t.width) == (3.0, 1.5, 6.1)
    assert t.runs[0].text == "GARAM%20MASALA%201A"


def test_load_document_missing_file_is_fatal(tmp_path):
    with pytest.raises(DocumentLoadError):
        load_document(tmp_path / "nope.json")


def test_load_document_invalid_json_is_fatal(tmp_path):
    p = tmp_path / "broken.json"
    p.write_text("{not json", encoding="utf-8")
    with pytest.raises(DocumentLoadError):
        load_document(p)


def test_parse_document_rejects_wrong_shape():
    with pytest.raises(DocumentLoadError):
        parse_document([1, 2, 3])
    with pytest.raises(DocumentLoadError):
        # a page without Width cannot be split into halves
        parse_document({"Pages": [{"Texts": []}]})


def test_document_without_pages_is_valid():
    doc = parse_document({"Meta": {}})
    assert doc.pages == []
    assert doc.source_pdf_file is None


def test_load_any_missing_file(tmp_path):
    with pytest.raises(DocumentLoadError):
        load_any(tmp_path / "missing.pdf")


# --- PDF adapter -------------------------------------------------------------


def test_pdf_loader_converts_spans_to_layout_units(monkeypatch):
    page = _FakePage(
        [
            ("GARAM MASALA 1A", (48.0, 32.0, 144.0, 44.0)),
            ("   ", (200.0, 32.0, 210.0, 44.0)),
            ("Kenttä 2", (320.0, 32.0, 400.0, 44.0)),
        ]
    )
    fake = _FakeDoc([page])
    monkeypatch.setattr(loader_mod.fitz, "open", lambda path: fake)

    ld = PDFLoader("schedule.pdf", unit_scale=16.0)
    doc = ld.to_document()

    assert doc.source_pdf_file == "schedule.pdf"
    assert len(doc.pages) == 1
    p = doc.pages[0]
    assert p.width == pytest.approx(842.0 / 16)
    assert p.height == pytest.approx(595.0 / 16)
    # blank span dropped
    assert len(p.texts) == 2
    first = p.texts[0]
    assert first.x == pytest.approx(3.0)
    assert first.y == pytest.approx(2.0)
    assert first.width == pytest.approx(6.0)
    # NBSP normalized, text percent-encoded like the JSON dumps
    assert first.runs[0].text == "GARAM%20MASALA%201A"
    assert p.texts[1].runs[0].text == "Kentt%C3%A4%202"


def test_pdf_loader_open_failure_is_fatal(monkeypatch):
    def boom(path):
        raise RuntimeError("cannot open broken document")

    monkeypatch.setattr(loader_mod.fitz, "open", boom)
    with pytest.raises(DocumentLoadError):
        PDFLoader("broken.pdf")


def test_load_any_pdf_closes_document(monkeypatch, tmp_path):
    pdf = tmp_path / "schedule.pdf"
    pdf.write_bytes(b"%PDF-1.4 fake")
    fake = _FakeDoc([_FakePage([])])
    monkeypatch.setattr(loader_mod.fitz, "open", lambda path: fake)

    doc = load_any(pdf)

    assert len(doc.pages) == 1
    assert doc.pages[0].texts == []
    assert fake.closed
