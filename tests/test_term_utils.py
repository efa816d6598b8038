import pytest

from utils import (
    TERMS, compare_terms, is_earlier, is_later_or_equal,
    normalize_term, parse_term, validate_term,
)


def test_terms_are_ordered():
    assert [parse_term(t) for t in TERMS] == list(range(8))


def test_parse_is_case_insensitive():
    assert parse_term(" 2b ") == 3
    assert normalize_term("4a") == "4A"


@pytest.mark.parametrize("bad", ["5A", "1C", "", "A1", None, 1])
def test_invalid_terms(bad):
    with pytest.raises(ValueError):
        parse_term(bad)
    assert validate_term(bad) is False


def test_compare():
    assert compare_terms("1A", "2A") == -1
    assert compare_terms("3B", "3b") == 0
    assert compare_terms("4B", "1A") == 1
    assert is_earlier("1B", "2A")
    assert not is_earlier("2A", "2A")
    assert is_later_or_equal("2A", "2A")
