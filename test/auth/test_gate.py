import pytest
from unittest.mock import Mock

from ledger.request import LedgerRequest


@pytest.fixture
def session(memory_store):
    return memory_store.create("alice", "acme")


def cookie_header(record, company="acme"):
    return f"LedgerSMB={record.session_id}:{record.token}:{company}"


def build(environ, config, store):
    return LedgerRequest("", environ=environ, config=config, session_store=store)


class TestVerifySession:
    def test_cli_always_valid(self, cli_environ, ledger_config, memory_store):
        request = build(cli_environ, ledger_config, memory_store)
        assert request.verify_session() is True
        assert request.session_id is None

    def test_gateway_valid_cookie(self, gateway_environ, ledger_config, memory_store, session):
        environ = dict(gateway_environ, HTTP_COOKIE=cookie_header(session))
        request = build(environ, ledger_config, memory_store)

        assert request.verify_session() is True
        assert request.session_id == session.session_id
        assert request.new_cookie == f"{session.session_id}:{session.token}:acme"

    def test_refreshed_cookie_leaves_stored_record_alone(self, gateway_environ, ledger_config, memory_store):
        record = memory_store.create("alice", None)
        environ = dict(gateway_environ, HTTP_COOKIE=cookie_header(record))
        request = build(environ, ledger_config, memory_store)

        assert request.verify_session() is True
        assert request.new_cookie == f"{record.session_id}:{record.token}:acme"
        assert memory_store._sessions[record.session_id].company is None

    def test_gateway_without_cookie(self, gateway_environ, ledger_config, memory_store):
        request = build(gateway_environ, ledger_config, memory_store)
        assert request.verify_session() is False

    def test_gateway_wrong_token(self, gateway_environ, ledger_config, memory_store, session):
        environ = dict(gateway_environ, HTTP_COOKIE=f"LedgerSMB={session.session_id}:forged:acme")
        request = build(environ, ledger_config, memory_store)

        assert request.verify_session() is False
        assert request.session_id is None

    def test_gateway_ignores_no_check_flag(self, gateway_environ, ledger_config, memory_store):
        environ = dict(gateway_environ, LEDGER_NO_SESSION_CHECK="1")
        request = build(environ, ledger_config, memory_store)
        assert request.verify_session() is False

    def test_embedded_checks_by_default(self, embedded_environ, ledger_config, memory_store):
        request = build(embedded_environ, ledger_config, memory_store)
        assert request.verify_session() is False

    def test_embedded_no_check_flag(self, embedded_environ, ledger_config, memory_store):
        environ = dict(embedded_environ, LEDGER_NO_SESSION_CHECK="1")
        request = build(environ, ledger_config, memory_store)
        assert request.verify_session() is True

    def test_store_consulted_once_per_check(self, gateway_environ, ledger_config, session):
        store = Mock()
        store.check.return_value = session
        environ = dict(gateway_environ, HTTP_COOKIE=cookie_header(session))
        request = build(environ, ledger_config, store)

        request.verify_session()

        cookie = store.check.call_args.args[0]
        assert cookie.session_id == session.session_id
        assert cookie.token == session.token


class TestFormTokens:
    @pytest.fixture
    def request_with_session(self, gateway_environ, ledger_config, memory_store, session):
        environ = dict(gateway_environ, HTTP_COOKIE=cookie_header(session))
        request = build(environ, ledger_config, memory_store)
        assert request.verify_session()
        return request

    def test_form_lifecycle(self, request_with_session):
        request = request_with_session

        assert request.open_form() is True
        form_id = request.form_id
        assert form_id is not None

        assert request.check_form() is True
        assert request.check_form() is True

        assert request.close_form() is True
        assert request.form_id is None

        request.form_id = form_id
        assert request.close_form() is False

    def test_check_form_without_form_id(self, request_with_session):
        assert request_with_session.check_form() is False

    def test_form_id_from_other_session(self, request_with_session, memory_store):
        other = memory_store.create("bob", "acme")
        foreign_form = memory_store.open_form(other.session_id)

        request_with_session.form_id = foreign_form
        assert request_with_session.check_form() is False

    def test_open_form_without_session(self, gateway_environ, ledger_config, memory_store):
        request = build(gateway_environ, ledger_config, memory_store)
        assert request.open_form() is False

    def test_open_form_commits(self, request_with_session, mock_connection):
        request_with_session.dbh = mock_connection
        request_with_session.open_form(commit=True)
        mock_connection.commit.assert_called_once()

    def test_cli_form_checks_short_circuit(self, cli_environ, ledger_config, memory_store):
        request = build(cli_environ, ledger_config, memory_store)

        assert request.open_form() is True
        assert request.check_form() is True
        assert request.close_form() is True
        assert request.form_id is None
