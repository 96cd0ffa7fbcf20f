import base64

import pytest
from httpx import AsyncClient

from service.dispatch import script
from session.models import SessionCookie


@script("test_echo")
def echo(request):
    return {"script": request.script, "action": request.action, "company": request.company, "id": request.get("id")}


@script("test_echo", action="page")
def echo_page(request):
    return "<p>ok</p>"


@script("test_echo", action="refuse")
def refuse(request):
    request.error("Posting period is closed", status=409)


@script("test_echo", action="done")
def done(request):
    request.finalize_request()


@script("test_form")
def form_round_trip(request):
    opened = request.open_form()
    return {"opened": opened, "form_id": request.form_id, "valid": request.check_form()}


def basic(login, password):
    return "Basic " + base64.b64encode(f"{login}:{password}".encode()).decode()


async def log_in(client: AsyncClient) -> str:
    response = await client.get("/login", params={"action": "authenticate"}, headers={"Authorization": basic("alice", "pw")})
    assert response.status_code == 200
    return response.cookies.get("LedgerSMB")


@pytest.mark.asyncio
async def test_status(client: AsyncClient):
    response = await client.get("/status")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_login_page_is_public(client: AsyncClient):
    response = await client.get("/login")
    assert response.status_code == 200
    assert response.json()["script"] == "login"


@pytest.mark.asyncio
async def test_authenticate_sets_cookie(client: AsyncClient, connection_factory, memory_store):
    cookie = await log_in(client)

    session_id, token, company = cookie.split(":")
    assert company == "acme"
    assert memory_store.check(SessionCookie(session_id=session_id, token=token)) is not None
    connection_factory.assert_called_once()
    login_company, credentials = connection_factory.call_args.args
    assert login_company == "acme"
    assert credentials.login == "alice"


@pytest.mark.asyncio
async def test_authenticate_without_credentials(client: AsyncClient):
    response = await client.get("/login", params={"action": "authenticate"})
    assert response.status_code == 401
    assert "Access Denied" in response.text


@pytest.mark.asyncio
async def test_script_requires_session(client: AsyncClient):
    response = await client.get("/test_echo")

    assert response.status_code == 403
    assert response.json()["error_code"] == "session_invalid"


@pytest.mark.asyncio
async def test_script_with_forged_cookie(client: AsyncClient):
    response = await client.get("/test_echo", headers={"Cookie": "LedgerSMB=abc:forged:acme"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_script_with_session(client: AsyncClient):
    cookie = await log_in(client)

    response = await client.get("/test_echo", params={"id": "5"}, headers={"Cookie": f"LedgerSMB={cookie}"})

    assert response.status_code == 200
    assert response.json() == {"script": "test_echo", "action": "", "company": "acme", "id": "5"}
    assert response.cookies.get("LedgerSMB") == cookie


@pytest.mark.asyncio
async def test_form_post(client: AsyncClient):
    cookie = await log_in(client)

    response = await client.post(
        "/test_echo?id=5",
        data={"action": "Page"},
        headers={"Cookie": f"LedgerSMB={cookie}"},
    )

    assert response.status_code == 200
    assert response.text == "<p>ok</p>"
    assert response.headers["content-type"].startswith("text/html")


@pytest.mark.asyncio
async def test_no_session_check_flag(client: AsyncClient, monkeypatch):
    monkeypatch.setenv("LEDGER_NO_SESSION_CHECK", "1")
    response = await client.get("/test_echo")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_abort_renders_error_page(client: AsyncClient):
    cookie = await log_in(client)

    response = await client.get("/test_echo", params={"action": "refuse"}, headers={"Cookie": f"LedgerSMB={cookie}"})

    assert response.status_code == 409
    assert "Posting period is closed" in response.text
    assert "company: acme" in response.text


@pytest.mark.asyncio
async def test_abort_on_head_has_no_body(client: AsyncClient):
    cookie = await log_in(client)

    response = await client.head("/test_echo", params={"action": "refuse"}, headers={"Cookie": f"LedgerSMB={cookie}"})

    assert response.status_code == 409
    assert response.content == b""


@pytest.mark.asyncio
async def test_finalized_request(client: AsyncClient):
    cookie = await log_in(client)

    response = await client.get("/test_echo", params={"action": "done"}, headers={"Cookie": f"LedgerSMB={cookie}"})

    assert response.status_code == 204


@pytest.mark.asyncio
async def test_unknown_script(client: AsyncClient, monkeypatch):
    monkeypatch.setenv("LEDGER_NO_SESSION_CHECK", "1")
    response = await client.get("/no_such_script")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_method_not_allowed(client: AsyncClient):
    response = await client.put("/test_echo")
    assert response.status_code == 405


@pytest.mark.asyncio
async def test_form_tokens(client: AsyncClient):
    cookie = await log_in(client)

    response = await client.get("/test_form", headers={"Cookie": f"LedgerSMB={cookie}"})

    body = response.json()
    assert body["opened"] is True
    assert body["form_id"] is not None
    assert body["valid"] is True


@pytest.mark.asyncio
async def test_logout(client: AsyncClient):
    cookie = await log_in(client)

    response = await client.get("/login", params={"action": "logout"}, headers={"Cookie": f"LedgerSMB={cookie}"})

    assert response.status_code == 200
    assert response.cookies.get("LedgerSMB") == "Login"
    response = await client.get("/test_echo", headers={"Cookie": f"LedgerSMB={cookie}"})
    assert response.status_code == 403
