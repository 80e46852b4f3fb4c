import pytest

from app.utils import (
    collation_key,
    contains_folded,
    extract_json_object,
    format_sequence_id,
    parse_sequence_number,
    title_initial,
)


def test_extract_json_object_from_markdown():
    payload = """
    Here is your payload:
    ```json
    {"director": "Denis Villeneuve"}
    ```
    """
    assert extract_json_object(payload) == {"director": "Denis Villeneuve"}


def test_extract_json_object_from_surrounding_prose():
    assert extract_json_object('Sure! {"year": 2021} Enjoy.') == {"year": 2021}


def test_extract_json_object_rejects_missing_payload():
    with pytest.raises(ValueError, match="No JSON object"):
        extract_json_object("no structured data here")


def test_extract_json_object_rejects_invalid_json():
    with pytest.raises(ValueError, match="Invalid JSON"):
        extract_json_object("{year: 2021,}")


def test_collation_ignores_case_and_accents_first():
    titles = ["Zodiac", "arrival", "Élan", "Blade"]
    assert sorted(titles, key=collation_key) == ["arrival", "Blade", "Élan", "Zodiac"]


def test_collation_places_lowercase_before_uppercase_on_ties():
    assert sorted(["Her", "her"], key=collation_key) == ["her", "Her"]


def test_title_initial_uppercases_first_character():
    assert title_initial("arrival") == "A"
    assert title_initial("  solaris") == "S"
    assert title_initial("银翼杀手") == "银"


def test_sequence_ids_round_trip_prefix():
    assert format_sequence_id("M", 9, 3) == "M009"
    assert format_sequence_id("M", 1234, 3) == "M1234"
    assert parse_sequence_number("M", "M042") == 42
    assert parse_sequence_number("M", "X042") is None
    assert parse_sequence_number("M", "Mabc") is None


def test_contains_folded_is_case_insensitive():
    assert contains_folded("Denis Villeneuve", "VILLENEUVE")
    assert contains_folded("anything", "")
    assert not contains_folded(None, "x")
