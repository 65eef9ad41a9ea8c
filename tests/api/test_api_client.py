# tests/api/test_api_client.py
"""
Testes do client HTTP base (ApiClient).

Os testes asseguram que:
- toda chamada leva o bearer token e o prefixo versionado
- token ausente falha antes de qualquer requisição
- 401/403, 404 e demais status viram exceções tipadas distintas
- timeout e erro de transporte viram `RemoteFailure`, sem retry
- corpo vazio é `None` e JSON inválido é falha remota

Limites explícitos:
    - Não usa rede: todas as respostas vêm de `httpx.MockTransport`
"""

import json

import httpx
import pytest

from otto_flow.api import ApiClient, client_from_config
from otto_flow.core.exceptions import AuthenticationRequired, NotFound, RemoteFailure


def test_request_sends_token_and_prefix(make_api):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    api = make_api(handler)
    body = api.request("POST", "/pipelines/pipe_1", json={"a": 1}, params={"q": "x"})

    assert body == {"ok": True}
    (request,) = seen
    assert request.method == "POST"
    assert request.url.path == "/api/v1/pipelines/pipe_1"
    assert request.url.params["q"] == "x"
    assert request.headers["Authorization"] == "Bearer t0k3n"
    assert json.loads(request.content) == {"a": 1}


def test_missing_token_fails_before_any_request(make_api):
    calls = []
    api = make_api(lambda request: calls.append(request) or httpx.Response(200), token=None)

    with pytest.raises(AuthenticationRequired) as exc:
        api.request("GET", "logs")

    assert calls == []
    assert exc.value.decision_required is True
    assert exc.value.details["endpoint"] == "/api/v1/logs"


@pytest.mark.parametrize("status", [401, 403])
def test_expired_session_requires_authentication(make_api, status):
    api = make_api(lambda request: httpx.Response(status, json={"error": "expired"}))

    with pytest.raises(AuthenticationRequired) as exc:
        api.request("GET", "logs")

    payload = exc.value.to_payload()
    assert payload.type == "AUTHENTICATION_REQUIRED"
    assert payload.details["status_code"] == status
    assert payload.decision_required is True


def test_not_found_carries_resource_id(make_api):
    api = make_api(lambda request: httpx.Response(404, json={"message": "no such pipeline"}))

    with pytest.raises(NotFound) as exc:
        api.request("GET", "pipelines/pipe_404")

    assert exc.value.details["resource_id"] == "pipe_404"
    assert exc.value.to_payload().type == "RESOURCE_NOT_FOUND"


@pytest.mark.parametrize(
    "response,reason",
    [
        (httpx.Response(500, json={"error": "db down"}), "db down"),
        (httpx.Response(422, json={"detail": "bad flow"}), "bad flow"),
        (httpx.Response(502, text="upstream unavailable"), "upstream unavailable"),
    ],
)
def test_other_statuses_are_remote_failures(make_api, response, reason):
    api = make_api(lambda request: response)

    with pytest.raises(RemoteFailure) as exc:
        api.request("GET", "logs")

    assert not isinstance(exc.value, NotFound)
    assert exc.value.status_code == response.status_code
    assert exc.value.details["reason"] == reason


def test_timeout_is_remote_failure_without_retry(make_api):
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ReadTimeout("too slow", request=request)

    api = make_api(handler)

    with pytest.raises(RemoteFailure) as exc:
        api.request("GET", "logs")

    assert exc.value.details["reason"] == "timeout"
    assert len(calls) == 1


def test_connection_error_is_remote_failure(make_api):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    api = make_api(handler)

    with pytest.raises(RemoteFailure) as exc:
        api.request("GET", "logs")

    assert "connection refused" in exc.value.details["reason"]


def test_empty_body_is_none_and_invalid_json_fails(make_api):
    assert make_api(lambda request: httpx.Response(204)).request("DELETE", "pipelines/pipe_1") is None

    api = make_api(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(RemoteFailure) as exc:
        api.request("GET", "logs")

    assert exc.value.details["reason"] == "invalid_json"


def test_client_from_config():
    config = {"api": {"base_url": "http://otto.test/", "api_prefix": "v2/", "timeout_seconds": 5}}

    with client_from_config(config, "tok", transport=httpx.MockTransport(lambda r: httpx.Response(200))) as api:
        assert isinstance(api, ApiClient)
        assert api.base_url == "http://otto.test"
        assert api.endpoint("/logs") == "/v2/logs"
        assert api.http_client.timeout == httpx.Timeout(5.0)


def test_empty_prefix():
    with ApiClient("http://otto.test", "tok", api_prefix="") as api:
        assert api.endpoint("logs") == "/logs"
