import pytest

from fieldsched.extract.catalogue import load_catalogue
from fieldsched.extract.detect import (
    NoField,
    PairedFields,
    SingleField,
    detect_field_names,
    synthesize_missing_sibling,
)
from fieldsched.extract.fragments import TextFragment


@pytest.fixture(scope="module")
def catalogue():
    return load_catalogue()


def _f(text, x, y=1.0, w=6.0):
    return TextFragment(text=text, x=x, y=y, width=w)


def test_line_without_field_names(catalogue):
    line = [_f("08.30 - 08.55", 2.0), _f("Team A", 10.0)]
    assert detect_field_names(line, 60.0, catalogue) == NoField()


def test_two_field_names_take_the_leftmost_two(catalogue):
    a = _f("GARAM MASALA 1A", 2.0)
    b = _f("GARAM MASALA 1B", 20.0)
    c = _f("GARAM MASALA 2A", 40.0)
    res = detect_field_names([c, b, a], 60.0, catalogue)
    assert res == PairedFields(left=a, right=b)
    assert not res.synthesized


def test_single_field_paired_code_wins_over_adjacent_text(catalogue):
    cand = _f("GARAM MASALA 1A", 2.0)
    noise = _f("Kenttä", 12.0)
    code = _f("1B", 25.0, w=1.0)
    res = detect_field_names([cand, noise, code], 60.0, catalogue)
    assert isinstance(res, PairedFields)
    assert res.right is code


def test_single_field_adjacent_sibling(catalogue):
    cand = _f("HEPA - HALLI A", 2.0, w=5.0)
    label = _f("KENTTÄ 2", 20.0)
    res = detect_field_names([cand, label], 60.0, catalogue)
    assert res == PairedFields(left=cand, right=label)


def test_adjacent_sibling_needs_gap_height_and_length(catalogue):
    cand = _f("HEPA - HALLI A", 2.0, w=5.0)
    too_close = _f("Kenttä 2", 7.1)  # inside width + 0.2
    too_short = _f("B", 20.0)
    off_baseline = _f("Kenttä 3", 30.0, y=1.6)
    res = detect_field_names([cand, too_close, too_short, off_baseline], 60.0, catalogue)
    assert res == SingleField(left=cand)


def test_missing_sibling_is_synthesized(catalogue):
    cand = _f("GARAM MASALA 1A", 3.0, y=5.0)
    res = detect_field_names([cand], 60.0, catalogue)
    assert isinstance(res, PairedFields)
    assert res.synthesized
    assert res.left is cand
    assert res.right.text == "GARAM MASALA 1B"
    assert res.right.x == pytest.approx(35.5)
    assert res.right.y == pytest.approx(5.0)


def test_missing_sibling_without_synthesis_reports_issue(catalogue):
    cand = _f("GARAM MASALA 2A", 3.0)
    issues = []
    res = detect_field_names([cand], 60.0, catalogue, issues)
    assert res == SingleField(left=cand)
    assert issues == ["No sibling found for 'GARAM MASALA 2A'"]


def test_non_pairing_single_field_is_quiet(catalogue):
    issues = []
    res = detect_field_names([_f("HEPA - HALLI A", 2.0)], 60.0, catalogue, issues)
    assert isinstance(res, SingleField)
    assert issues == []


def test_synthesize_missing_sibling_only_for_configured_venues(catalogue):
    assert synthesize_missing_sibling(_f("NURMI 1A", 2.0), catalogue) is None
    assert synthesize_missing_sibling(_f("GARAM MASALA 1B", 2.0), catalogue) is None
