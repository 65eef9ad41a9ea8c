# tests/errors/test_error_payloads.py
"""
Test — Payload canônico de erro

Cenário: cada fábrica do catálogo gera um payload estável, e cada
exceção interna converte-se de/para esse payload sem perda.
Esperado: `type` estável, `details` estruturado, `decision_required`
marcado apenas quando o fluxo aguarda ação humana.
"""

import pytest

from otto_flow.core.errors import (
    AUTHENTICATION_REQUIRED,
    GRAPH_VALIDATION_FAILED,
    REMOTE_FAILURE,
    RESOURCE_NOT_FOUND,
    STATUS_CONFLICT,
    authentication_required,
    graph_validation_failed,
    remote_failure,
    resource_not_found,
    status_conflict,
)
from otto_flow.core.exceptions import (
    AuthenticationRequired,
    GraphValidationError,
    NotFound,
    OttoException,
    RemoteFailure,
)

_MIN_KEYS = {"type", "message", "details", "hint", "decision_required"}


@pytest.mark.parametrize(
    "payload,expected_type,decision",
    [
        (graph_validation_failed(violations=[], action="save"), GRAPH_VALIDATION_FAILED, False),
        (status_conflict(subject_id="s", current="success", attempted="running"), STATUS_CONFLICT, False),
        (remote_failure(endpoint="/x", status_code=500, reason="boom"), REMOTE_FAILURE, False),
        (authentication_required(endpoint="/x", status_code=401), AUTHENTICATION_REQUIRED, True),
        (resource_not_found(endpoint="/x", resource_id="pipe_1"), RESOURCE_NOT_FOUND, False),
    ],
)
def test_catalog_payloads(payload, expected_type, decision):
    data = payload.to_dict()

    assert set(data) == _MIN_KEYS
    assert data["type"] == expected_type
    assert data["decision_required"] is decision
    assert isinstance(data["details"], dict)
    assert data["message"]
    assert data["hint"]


def test_exception_round_trip_through_payload():
    payload = remote_failure(endpoint="/api/v1/logs", status_code=502, reason="bad gateway")

    err = RemoteFailure.from_payload(payload)

    assert isinstance(err, OttoException)
    assert err.status_code == 502
    assert err.to_payload() == payload


def test_not_found_is_a_remote_failure_with_its_own_code():
    err = NotFound.from_payload(resource_not_found(endpoint="/api/v1/pipelines/pipe_9", resource_id="pipe_9"))

    assert isinstance(err, RemoteFailure)
    assert err.to_payload().type == RESOURCE_NOT_FOUND
    assert err.details["resource_id"] == "pipe_9"


def test_authentication_required_keeps_decision_flag():
    err = AuthenticationRequired.from_payload(authentication_required(status_code=403))

    assert err.decision_required is True
    assert err.to_payload().decision_required is True


def test_graph_validation_error_exposes_violations():
    violations = [{"code": "CYCLE", "element_id": "e1"}]
    err = GraphValidationError.from_payload(graph_validation_failed(violations=violations, action="run"))

    assert err.violations == violations
    assert err.details["action"] == "run"

    with pytest.raises(OttoException):
        raise err
