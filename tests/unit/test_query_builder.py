"""
Module: tests/unit/test_query_builder.py

What:
    Exercise the fluent :class:`SearchQuery` builder: statement recording,
    alias equivalence, date normalisation, option setters, and the hand-off to
    the executor in :meth:`SearchQuery.get`.

Why:
    The builder is the public face of mailsift. Its recorded state is what the
    executor forwards to the server, so ordering and value normalisation must
    stay exact.

How:
    Builders are bound to a :class:`unittest.mock.Mock` executor; assertions
    inspect ``get_statements()`` and the positional arguments of
    ``search_messages``.

Interfaces:
    Pytest test functions only.

Invariants & Safety Rules:
    - No test touches the network; the executor is always a mock.
"""

from datetime import date, datetime
from unittest import mock

import pytest

from mailsift.core.query import SearchQuery
from mailsift.core.statement import ExecutionOptions, FetchMode, Statement


@pytest.fixture
def executor():
    return mock.Mock(name="folder")


@pytest.fixture
def query(executor):
    return SearchQuery(executor)


def test_fresh_builder_state(query, executor):
    assert query.get_statements() == []
    assert query.get_fetch_mode() is FetchMode.DEFAULT
    assert query.get_charset() is None
    assert query.options == ExecutionOptions()
    assert query.folder is executor


def test_statements_recorded_in_call_order(query):
    """
    What:
        A chain of flag, string and date predicates is recorded in call order.

    Why:
        Criteria are forwarded to the server in statement order; any reordering
        changes what a user reads back from ``get_statements``.

    How:
        Chain three predicates and compare with plain tuples, which
        :class:`Statement` compares equal to.
    """

    query.unseen().from_("a@b.c").since(date(2018, 4, 8))

    assert query.get_statements() == [
        ("UNSEEN",),
        ("FROM", "a@b.c"),
        ("SINCE", "08 Apr 18"),
    ]


@pytest.mark.parametrize(
    "method, key",
    [
        ("all", "ALL"),
        ("answered", "ANSWERED"),
        ("unanswered", "UNANSWERED"),
        ("deleted", "DELETED"),
        ("undeleted", "UNDELETED"),
        ("flagged", "FLAGGED"),
        ("unflagged", "UNFLAGGED"),
        ("new", "NEW"),
        ("old", "OLD"),
        ("recent", "RECENT"),
        ("seen", "SEEN"),
        ("unseen", "UNSEEN"),
    ],
)
def test_flag_predicates_record_key_only(query, method, key):
    getattr(query, method)()

    [statement] = query.get_statements()
    assert statement == (key,)
    assert not statement.has_value


@pytest.mark.parametrize(
    "method, key",
    [
        ("bcc", "BCC"),
        ("body", "BODY"),
        ("cc", "CC"),
        ("from_", "FROM"),
        ("to", "TO"),
        ("subject", "SUBJECT"),
        ("text", "TEXT"),
        ("contains_keyword", "KEYWORD"),
        ("does_not_contain_keyword", "UNKEYWORD"),
    ],
)
def test_string_predicates_record_value_verbatim(query, method, key):
    getattr(query, method)("Quarterly report")

    assert query.get_statements() == [(key, "Quarterly report")]


def test_aliases_record_identical_statements(executor):
    read = SearchQuery(executor).read().unread()
    seen = SearchQuery(executor).seen().unseen()

    assert read.get_statements() == seen.get_statements() == [("SEEN",), ("UNSEEN",)]


def test_from_is_reachable_under_its_keyword_name(query):
    getattr(query, "from")("x@y.z")

    assert query.get_statements() == [("FROM", "x@y.z")]


@pytest.mark.parametrize(
    "value",
    [date(2018, 4, 8), datetime(2018, 4, 8, 23, 59, 1)],
)
def test_dates_are_normalised_when_added(query, value):
    query.before(value).on(value).since(value)

    assert [s.value for s in query.get_statements()] == ["08 Apr 18"] * 3


def test_date_strings_are_stored_verbatim(query):
    query.since("8-Apr-2018")

    assert query.get_statements() == [("SINCE", "8-Apr-2018")]


def test_two_digit_year_and_day_are_zero_padded(query):
    query.on(date(2005, 1, 3))

    assert query.get_statements() == [("ON", "03 Jan 05")]


def test_add_statement_distinguishes_absent_and_none(query):
    """
    What:
        ``add_statement("k")`` and ``add_statement("k", None)`` yield different
        statements.

    Why:
        The executor treats a key-only statement differently from one carrying
        an explicit value, even when that value is ``None``.

    How:
        Record both forms and compare tuple shapes.
    """

    query.add_statement("k").add_statement("k", None)

    first, second = query.get_statements()
    assert first == ("k",)
    assert second == ("k", None)
    assert first != second
    assert second.has_value and second.value is None


def test_add_statement_accepts_arbitrary_keywords(query):
    query.add_statement("X-GM-RAW", "has:attachment").add_statement("LARGER", 1024)

    assert query.get_statements() == [("X-GM-RAW", "has:attachment"), ("LARGER", 1024)]


def test_add_statement_normalises_dates(query):
    query.add_statement("SENTSINCE", date(2018, 12, 25))

    assert query.get_statements() == [("SENTSINCE", "25 Dec 18")]


def test_predicates_return_the_same_builder(query):
    assert query.unseen() is query
    assert query.subject("x") is query
    assert query.add_statement("ALL") is query
    assert query.mark_as_read() is query
    assert query.charset("UTF-8") is query
    assert query.fetch_body(False) is query


def test_last_fetch_mode_call_wins(query):
    query.mark_as_read().leave_unread()
    assert query.get_fetch_mode() is FetchMode.LEAVE_PEEK

    query.mark_as_read()
    assert query.get_fetch_mode() is FetchMode.MARK_AS_READ


def test_charset_can_be_set_and_cleared(query):
    query.charset("UTF-8")
    assert query.get_charset() == "UTF-8"

    query.charset(None)
    assert query.get_charset() is None


def test_fetch_toggles_default_to_enabled(query):
    query.fetch_body(False).fetch_attachments(False)
    assert query.options.fetch_body is False
    assert query.options.fetch_attachments is False

    query.fetch_body().fetch_attachments()
    assert query.options.fetch_body is True
    assert query.options.fetch_attachments is True


def test_get_statements_returns_a_copy(query):
    query.seen()
    snapshot = query.get_statements()
    snapshot.append(Statement("DELETED"))

    assert query.get_statements() == [("SEEN",)]


def test_get_forwards_state_positionally(query, executor):
    """
    What:
        ``get`` calls ``search_messages(statements, fetch_mode, fetch_body,
        charset, fetch_attachments)`` positionally and returns its result.

    Why:
        Executors implement the positional signature; keyword hand-off would
        break implementations that name their parameters differently.

    How:
        Configure every option, call ``get`` and inspect the mock call.
    """

    executor.search_messages.return_value = ["m1", "m2"]
    query.unseen().subject("invoice").mark_as_read().charset("UTF-8").fetch_attachments(False)

    result = query.get()

    assert result == ["m1", "m2"]
    executor.search_messages.assert_called_once_with(
        [("UNSEEN",), ("SUBJECT", "invoice")],
        FetchMode.MARK_AS_READ,
        True,
        "UTF-8",
        False,
    )


def test_get_on_empty_builder_passes_defaults(query, executor):
    executor.search_messages.return_value = []

    assert query.get() == []
    executor.search_messages.assert_called_once_with([], FetchMode.DEFAULT, True, None, True)


def test_get_propagates_executor_errors(query, executor):
    executor.search_messages.side_effect = RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        query.seen().get()


def test_get_passes_a_snapshot_and_can_be_repeated(query, executor):
    query.seen()
    query.get()
    passed = executor.search_messages.call_args.args[0]
    passed.append(Statement("ALL"))

    query.get()

    assert query.get_statements() == [("SEEN",)]
    assert executor.search_messages.call_count == 2


def test_builders_on_one_executor_are_independent(executor):
    first = SearchQuery(executor).seen()
    second = SearchQuery(executor).unseen().mark_as_read()

    assert first.get_statements() == [("SEEN",)]
    assert first.get_fetch_mode() is FetchMode.DEFAULT
    assert second.get_statements() == [("UNSEEN",)]
