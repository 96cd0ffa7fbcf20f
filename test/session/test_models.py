import pytest

from session.models import SessionCookie, SessionRecord


@pytest.mark.parametrize("value, expected", [
    ("abc:tok:acme", ("abc", "tok", "acme")),
    ("abc:tok:", ("abc", "tok", None)),
    ("abc:tok", ("abc", "tok", None)),
    ("abc:tok:acme:east", ("abc", "tok", "acme:east")),
])
def test_parse_cookie(value, expected):
    cookie = SessionCookie.parse(value)
    assert (cookie.session_id, cookie.token, cookie.company) == expected


@pytest.mark.parametrize("value", [None, "", "Login", ":tok:acme", "abc::acme"])
def test_parse_unusable_cookie(value):
    assert SessionCookie.parse(value) is None


def test_serialize():
    assert SessionCookie(session_id="abc", token="tok", company="acme").serialize() == "abc:tok:acme"
    assert SessionCookie(session_id="abc", token="tok").serialize() == "abc:tok:"


def test_record_to_cookie():
    record = SessionRecord(session_id="abc", token="tok", login="alice", company="acme")
    assert record.to_cookie() == SessionCookie(session_id="abc", token="tok", company="acme")
