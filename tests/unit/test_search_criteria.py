"""Unit tests for the statement to ``imapclient`` criteria translation."""

from datetime import date

import pytest

from mailsift.core.query import SearchQuery
from mailsift.core.statement import Statement, format_search_date
from mailsift.imap.search import build_criteria, parse_search_date


def test_empty_statement_list_searches_all():
    assert build_criteria([]) == ["ALL"]


def test_criteria_follow_statement_order():
    query = SearchQuery(None)
    query.unseen().from_("a@b.c").subject("Invoice").since(date(2018, 4, 8))

    assert build_criteria(query.get_statements()) == [
        "UNSEEN",
        "FROM",
        "a@b.c",
        "SUBJECT",
        "Invoice",
        "SINCE",
        date(2018, 4, 8),
    ]


@pytest.mark.parametrize("key", ["BEFORE", "ON", "SINCE", "SENTBEFORE", "SENTON", "SENTSINCE"])
def test_date_keys_are_converted_back_to_dates(key):
    assert build_criteria([Statement(key, "08 Apr 18")]) == [key, date(2018, 4, 8)]


def test_date_key_matching_is_case_insensitive():
    assert build_criteria([("since", "2018-04-08")]) == ["since", date(2018, 4, 8)]


def test_unparseable_date_is_forwarded_verbatim():
    assert build_criteria([Statement("BEFORE", "last tuesday")]) == ["BEFORE", "last tuesday"]


def test_non_date_keys_keep_date_like_strings():
    assert build_criteria([Statement("SUBJECT", "08 Apr 18")]) == ["SUBJECT", "08 Apr 18"]


def test_none_value_is_dropped_but_key_kept():
    assert build_criteria([Statement("X-CUSTOM", None), Statement("SEEN")]) == ["X-CUSTOM", "SEEN"]


def test_plain_tuples_and_non_string_values_are_accepted():
    assert build_criteria([("LARGER", 2048), ("KEYWORD", "$Label1")]) == [
        "LARGER",
        2048,
        "KEYWORD",
        "$Label1",
    ]


@pytest.mark.parametrize(
    "text, expected",
    [
        ("08 Apr 18", date(2018, 4, 8)),
        ("2018-04-08", date(2018, 4, 8)),
        ("8-Apr-2018", date(2018, 4, 8)),
        (" 31 Dec 99 ", date(1999, 12, 31)),
        ("not a date", None),
    ],
)
def test_parse_search_date(text, expected):
    assert parse_search_date(text) == expected


@pytest.mark.parametrize(
    "value",
    [date(1965, 1, 1), date(1899, 12, 31), date(2075, 6, 1), date(2150, 3, 9)],
)
def test_builder_dates_keep_their_century(value):
    statements = SearchQuery(None).before(value).since(value).get_statements()
    text = format_search_date(value)

    assert statements == [("BEFORE", text), ("SINCE", text)]
    assert build_criteria(statements) == ["BEFORE", value, "SINCE", value]


@pytest.mark.parametrize(
    "text, expected",
    [
        ("01 Jan 65", date(2065, 1, 1)),
        ("01 Jan 77", date(1977, 1, 1)),
        ("01 Jun 75", date(2075, 6, 1)),
        ("31 Dec 99", date(1999, 12, 31)),
    ],
)
def test_two_digit_years_use_a_window_around_today(text, expected):
    assert parse_search_date(text, today=date(2026, 10, 18)) == expected


def test_two_digit_window_moves_with_today():
    assert parse_search_date("01 Jan 65", today=date(1990, 1, 1)) == date(1965, 1, 1)
    assert parse_search_date("01 Jun 05", today=date(2110, 1, 1)) == date(2105, 6, 1)
