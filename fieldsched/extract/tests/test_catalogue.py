import pytest

from fieldsched.extract.catalogue import (
    catalogue_from_dict,
    load_catalogue,
    parse_field_number,
)


@pytest.fixture(scope="module")
def catalogue():
    return load_catalogue()


@pytest.mark.parametrize(
    "text",
    [
        "GARAM MASALA 1A",
        "garam masala 2c",
        "GARAM  MASALA 1B",
        "HEPA - HALLI B",
        "Heinäpään tekonurmi",
        "NURMI 3A",
    ],
)
def test_known_field_names(catalogue, text):
    assert catalogue.is_field_name(text)


@pytest.mark.parametrize("text", ["FC Kontu P12", "08.30 - 08.55", "", "   "])
def test_not_field_names(catalogue, text):
    assert not catalogue.is_field_name(text)


def test_parse_field_number():
    num = parse_field_number("GARAM  MASALA 1A")
    assert num is not None
    assert (num.base, num.number, num.letter, num.code) == ("GARAM MASALA", "1", "A", "1A")
    assert num.with_letter("B") == "GARAM MASALA 1B"
    assert parse_field_number("HEPA - HALLI A") is None


def test_sibling_name(catalogue):
    assert catalogue.sibling_name("GARAM MASALA 1A") == "GARAM MASALA 1B"
    assert catalogue.sibling_name("GARAM MASALA 2C") == "GARAM MASALA 2D"
    # second letter of a pair has no right sibling
    assert catalogue.sibling_name("GARAM MASALA 1B") is None
    # venue without pairing
    assert catalogue.sibling_name("HEPA - HALLI A") is None


def test_is_sibling_pair(catalogue):
    assert catalogue.is_sibling_pair("GARAM MASALA 1A", "GARAM  MASALA 1B")
    assert not catalogue.is_sibling_pair("GARAM MASALA 1A", "GARAM MASALA 2B")
    assert not catalogue.is_sibling_pair("HEPA - HALLI A", "HEPA - HALLI B")


def test_synthesis_only_for_configured_field_numbers(catalogue):
    synth = catalogue.synthesis_for("GARAM MASALA 1A")
    assert synth is not None
    assert synth.offset_x == pytest.approx(32.5)
    assert catalogue.synthesis_for("GARAM MASALA 2A") is None
    assert catalogue.synthesis_for("NURMI 1A") is None


def test_default_year_markers(catalogue):
    assert [(m.marker, m.label) for m in catalogue.year_markers] == [
        (" 17 ", "2017 A"),
        (" 19 ", "2019 VP"),
        (" 20 ", "2020 / 2019 EP"),
    ]


def test_field_detection_tolerance_depends_on_orientation(catalogue):
    tol = catalogue.tolerances
    assert tol.field_detection(120.0) == pytest.approx(0.5)
    assert tol.field_detection(40.0) == pytest.approx(0.2)


def test_custom_catalogue_defaults():
    cat = catalogue_from_dict({"venues": [{"name": "FIELD", "patterns": [r"^FIELD\b"]}]})
    assert cat.is_field_name("Field X")
    assert cat.pairs == {"A": "B", "C": "D"}
    assert cat.year_markers == []
    assert cat.tolerances.header_fields == 3


def test_unknown_tolerance_key_rejected():
    with pytest.raises(ValueError):
        catalogue_from_dict({"venues": [], "tolerances": {"line_yy": 0.2}})
