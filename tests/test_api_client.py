import pytest
import requests

from conftest import FakeResponse
from services.credentials import EnvCredentialProvider, StaticCredentialProvider
from services.errors import NetworkError


def test_bearer_token_and_timeout_are_attached(make_client):
    client, session = make_client(FakeResponse(200, {"ok": True}))

    assert client.get("/ping", params={"a": 1}) == {"ok": True}

    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://api.example.test/v1/ping"
    assert call["params"] == {"a": 1}
    assert call["headers"]["Authorization"] == "Bearer test-token"
    assert call["timeout"] == 15


def test_no_token_means_no_authorization_header(make_client):
    client, session = make_client(FakeResponse(200, []), token=None)

    client.post("/x", json={"k": "v"})

    assert "Authorization" not in session.calls[0]["headers"]
    assert session.calls[0]["json"] == {"k": "v"}


def test_server_message_is_surfaced(make_client):
    client, _ = make_client(FakeResponse(502, {"message": "provider timeout"}))

    with pytest.raises(NetworkError) as exc:
        client.post("/lsp/search", json={}, fallback_message="search failed")

    assert exc.value.message == "provider timeout"
    assert exc.value.status_code == 502


def test_meta_message_is_surfaced(make_client):
    client, _ = make_client(FakeResponse(404, {"meta": {"status": False, "message": "Not found"}}))

    with pytest.raises(NetworkError) as exc:
        client.get("/draft_orders/get/nope")

    assert exc.value.message == "Not found"


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(500, text="<html>Internal Server Error</html>"),
        FakeResponse(400, {"error": "bad"}),
        FakeResponse(503, {"message": "   "}),
    ],
)
def test_generic_message_when_server_gives_none(make_client, response):
    client, _ = make_client(response)

    with pytest.raises(NetworkError) as exc:
        client.post("/lsp/search", fallback_message="search failed")

    assert exc.value.message == "search failed"


def test_transport_errors_become_network_errors(make_client):
    client, _ = make_client(requests.Timeout("read timed out"))

    with pytest.raises(NetworkError) as exc:
        client.post("/lsp/search", fallback_message="search failed")

    assert exc.value.message == "search failed"
    assert exc.value.status_code is None


def test_empty_success_body_returns_none(make_client):
    client, _ = make_client(FakeResponse(204))

    assert client.post("/draft_orders/delete", json={"ids": ["a"]}) is None


def test_non_json_success_body_is_an_error(make_client):
    client, _ = make_client(FakeResponse(200, text="OK"))

    with pytest.raises(NetworkError):
        client.get("/x", fallback_message="broken")


def test_credential_providers(monkeypatch):
    assert StaticCredentialProvider("  abc ").get_token() == "abc"
    assert StaticCredentialProvider("").get_token() is None

    provider = EnvCredentialProvider("LSP_TEST_TOKEN")
    monkeypatch.setenv("LSP_TEST_TOKEN", "from-env")
    assert provider.get_token() == "from-env"
    monkeypatch.setenv("LSP_TEST_TOKEN", "")
    assert provider.get_token() is None
