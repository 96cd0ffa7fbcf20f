import pytest

from ledger.params import company_from_cookie, join_query, normalize_action, parse_cookies, parse_query


def test_parse_query_empty():
    assert parse_query(None) == {}
    assert parse_query("") == {}


def test_parse_query_leading_question_mark():
    assert parse_query("?id=3&name=A%26B") == {"id": "3", "name": "A&B"}


def test_parse_query_drops_blank_values():
    assert parse_query("a=&b=1") == {"b": "1"}


def test_parse_query_repeated_keys():
    assert parse_query("tag=a&tag=b&tag=c") == {"tag": ["a", "b", "c"]}


def test_parse_query_action_keeps_first():
    assert parse_query("action=save&action=print") == {"action": "save"}


def test_join_query():
    assert join_query("a=1", "", None, "?b=2") == "a=1&b=2"


@pytest.mark.parametrize("raw, expected", [
    (None, ""),
    ("", ""),
    ("Add Line", "add_line"),
    ("e-mail", "e_mail"),
])
def test_normalize_action(raw, expected):
    assert normalize_action(raw) == expected


def test_parse_cookies():
    cookies = parse_cookies("LedgerSMB=abc:def:acme;  theme=dark;")
    assert cookies == {"LedgerSMB": "abc:def:acme", "theme": "dark"}


def test_parse_cookies_empty():
    assert parse_cookies(None) == {}


@pytest.mark.parametrize("cookie, company", [
    ("abc:def:acme", "acme"),
    ("acme", "acme"),
    ("Login", None),
    ("abc:def:Login", None),
    ("", None),
    (None, None),
])
def test_company_from_cookie(cookie, company):
    assert company_from_cookie(cookie) == company
