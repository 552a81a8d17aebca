"""
tests/test_cell_parser.py

Pytest unit tests for the lenient cell parsers and the hashtag extractor.

Nothing here raises on bad input, so every case asserts a fallback value
rather than an exception.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.services.hashtag_extractor import extract_hashtags
from app.validators.cell_parser import (
    format_locale_date,
    is_completely_empty_row,
    parse_date,
    parse_earning,
)


class TestParseEarning:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            (None, 0.0),
            ("", 0.0),
            ("   ", 0.0),
            (12.5, 12.5),
            (7, 7.0),
            ("1,234.5", 1234.5),
            (" 3 ", 3.0),
            ("-2.5", -2.5),
            ("abc", 0.0),
            ("inf", 0.0),
            (float("nan"), 0.0),
            (True, 0.0),
        ],
    )
    def test_values(self, raw, expected) -> None:
        assert parse_earning(raw) == expected


class TestParseDate:
    def test_iso_date_is_utc_midnight(self) -> None:
        assert parse_date("2024-01-05") == datetime(2024, 1, 5, tzinfo=timezone.utc)

    def test_zulu_timestamp(self) -> None:
        assert parse_date("2024-01-05T10:30:00Z") == datetime(2024, 1, 5, 10, 30, tzinfo=timezone.utc)

    def test_us_month_day_year(self) -> None:
        assert parse_date("01/31/2024") == datetime(2024, 1, 31, tzinfo=timezone.utc)

    def test_month_name_format(self) -> None:
        assert parse_date("Mar 7, 2024") == datetime(2024, 3, 7, tzinfo=timezone.utc)

    @pytest.mark.parametrize("raw", [None, "", "not a date", "31/31/2024"])
    def test_unparsable_is_none(self, raw) -> None:
        assert parse_date(raw) is None


class TestFormatLocaleDate:
    def test_day_and_month_are_not_padded(self) -> None:
        assert format_locale_date(datetime(2024, 1, 5, tzinfo=timezone.utc)) == "5/1/2024"

    def test_two_digit_day_and_month(self) -> None:
        assert format_locale_date(datetime(2023, 12, 25, tzinfo=timezone.utc)) == "25/12/2023"


class TestEmptyRow:
    def test_blank_values_and_overflow_are_empty(self) -> None:
        assert is_completely_empty_row({"a": "", "b": None, None: ["", " "]})

    def test_any_value_makes_row_non_empty(self) -> None:
        assert not is_completely_empty_row({"a": "", "b": "0"})


class TestExtractHashtags:
    def test_lower_cases_and_deduplicates_in_first_seen_order(self) -> None:
        assert extract_hashtags("Hi #Tet and #tet then #Vlog_2024") == ["#tet", "#vlog_2024"]

    def test_punctuation_terminates_a_token(self) -> None:
        assert extract_hashtags("#cat, #dog! #bird.") == ["#cat", "#dog", "#bird"]

    def test_unicode_letters_are_part_of_the_token(self) -> None:
        assert extract_hashtags("Món ngon #ẨmThực #ẩmthực") == ["#ẩmthực"]

    def test_bare_hash_is_not_a_token(self) -> None:
        assert extract_hashtags("# nothing #") == []

    @pytest.mark.parametrize("text", [None, ""])
    def test_empty_input(self, text) -> None:
        assert extract_hashtags(text) == []
