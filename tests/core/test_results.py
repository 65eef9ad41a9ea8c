# tests/core/test_results.py
"""
Testes dos estados de consulta (Idle, Loading, Success, Failure).
"""

import pytest

from otto_flow.core.errors import authentication_required, remote_failure
from otto_flow.core.exceptions import AuthenticationRequired, RemoteFailure
from otto_flow.core.results import Failure, Idle, Loading, Success, from_call


def test_from_call_wraps_success():
    result = from_call(lambda a, b=0: a + b, 1, b=2)

    assert result == Success(3)


def test_from_call_wraps_remote_failure():
    def boom():
        raise RemoteFailure.from_payload(remote_failure(endpoint="/api/v1/logs", status_code=503, reason="down"))

    result = from_call(boom)

    assert isinstance(result, Failure)
    assert result.error.type == "REMOTE_FAILURE"
    assert result.error.details["status_code"] == 503
    assert not result.requires_authentication


def test_authentication_failure_is_flagged():
    def expired():
        raise AuthenticationRequired.from_payload(authentication_required(endpoint="/api/v1/logs", status_code=401))

    result = from_call(expired)

    assert isinstance(result, Failure)
    assert result.requires_authentication


def test_programming_errors_are_not_wrapped():
    def bug():
        raise KeyError("oops")

    with pytest.raises(KeyError):
        from_call(bug)


def test_idle_and_loading_are_values():
    assert Idle() == Idle()
    assert Loading() == Loading()
    assert Idle() != Loading()
