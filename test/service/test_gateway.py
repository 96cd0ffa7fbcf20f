import io

import psycopg2.errors
import pytest

from service.dispatch import script
from service.gateway import read_body, run_gateway, write_response


@script("test_gateway_ledger")
def ledger_report(request):
    return {"company": request.company, "amount": request.get("amount")}


@script("test_gateway_ledger", action="fail")
def ledger_fail(request):
    request.error("Account is locked", status=423)


@script("test_gateway_public", public=True)
def public_broken(request):
    raise psycopg2.errors.UndefinedTable("relation \"defaults\" does not exist")


@pytest.fixture
def environ():
    return {
        "GATEWAY_INTERFACE": "CGI/1.1",
        "REQUEST_METHOD": "GET",
        "SCRIPT_NAME": "/cgi-bin/test_gateway_ledger",
    }


def run(environ, config, store, body=b""):
    out = io.StringIO()
    status = run_gateway(environ, io.BytesIO(body), out, config=config, session_store=store)
    return status, out.getvalue()


def test_write_response():
    out = io.StringIO()
    write_response(out, 404, "<p>missing</p>")
    assert out.getvalue() == "Status: 404 Not Found\r\nContent-Type: text/html; charset=utf-8\r\n\r\n<p>missing</p>"


def test_read_body():
    assert read_body({"CONTENT_LENGTH": "5"}, io.BytesIO(b"a=1&b=2")) == "a=1&b"
    assert read_body({}, io.BytesIO(b"a=1")) == ""
    assert read_body({"CONTENT_LENGTH": "lots"}, io.BytesIO(b"a=1")) == ""


def test_gateway_requires_session(environ, ledger_config, memory_store):
    status, output = run(environ, ledger_config, memory_store)

    assert status == 403
    assert output.startswith("Status: 403 Forbidden\r\n")
    assert "Session invalid or expired" in output


def test_gateway_ignores_no_check_flag(environ, ledger_config, memory_store):
    environ["LEDGER_NO_SESSION_CHECK"] = "1"
    status, _ = run(environ, ledger_config, memory_store)
    assert status == 403


def test_gateway_with_session(environ, ledger_config, memory_store):
    record = memory_store.create("alice", "acme")
    environ.update(
        REQUEST_METHOD="POST",
        CONTENT_TYPE="application/x-www-form-urlencoded",
        CONTENT_LENGTH="11",
        HTTP_COOKIE=f"LedgerSMB={record.session_id}:{record.token}:acme",
    )

    status, output = run(environ, ledger_config, memory_store, body=b"amount=9.50")

    assert status == 200
    headers, body = output.split("\r\n\r\n", 1)
    assert "Content-Type: application/json" in headers
    assert f"Set-Cookie: LedgerSMB={record.session_id}:{record.token}:acme" in headers
    assert body == '{"company": "acme", "amount": "9.50"}'


def test_gateway_abort(environ, ledger_config, memory_store):
    record = memory_store.create("alice", "acme")
    environ.update(
        QUERY_STRING="action=fail",
        HTTP_COOKIE=f"LedgerSMB={record.session_id}:{record.token}:acme",
    )

    status, output = run(environ, ledger_config, memory_store)

    assert status == 423
    assert "Account is locked" in output


def test_gateway_bad_method(environ, ledger_config, memory_store):
    environ["REQUEST_METHOD"] = "DELETE"

    status, output = run(environ, ledger_config, memory_store)

    assert status == 405
    assert "Request method unset or set to unknown value" in output


def test_gateway_unexpected_error(environ, ledger_config, memory_store):
    environ["SCRIPT_NAME"] = "/cgi-bin/test_gateway_public"

    status, output = run(environ, ledger_config, memory_store)

    assert status == 500
    assert output.startswith("Status: 500 Internal Server Error\r\n")
    assert "Internal server error occurred" in output
    assert "defaults" not in output
