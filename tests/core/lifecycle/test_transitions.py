# tests/core/lifecycle/test_transitions.py
"""
Testes das regras puras de transição e da derivação de status.

Os testes asseguram que:
- pending -> running -> success é aceito em ordem
- retrocessos são `StatusConflict`, nunca aplicados
- troca de terminal é aplicada: o último estado terminal vence
- replay do mesmo estado é no-op idempotente
- o status do pipeline é derivado dos estágios conforme as regras
- o vocabulário remoto é traduzido para os quatro estados canônicos
"""

import pytest

from otto_flow.core.lifecycle import (
    ExecutionStatus,
    TransitionKind,
    derive_pipeline_status,
    status_from_remote,
    transition,
)

P, R, S, F = (
    ExecutionStatus.PENDING,
    ExecutionStatus.RUNNING,
    ExecutionStatus.SUCCESS,
    ExecutionStatus.FAILED,
)


def test_rank_and_terminal_flags():
    assert [s.rank for s in (P, R, S, F)] == [0, 1, 2, 2]
    assert [s.is_terminal for s in (P, R, S, F)] == [False, False, True, True]


@pytest.mark.parametrize("current,target", [(P, R), (R, S), (R, F), (P, S), (P, F)])
def test_forward_transitions_are_applied(current, target):
    outcome = transition(current, target)

    assert outcome.kind is TransitionKind.APPLIED
    assert outcome.applied
    assert outcome.status is target
    assert outcome.conflict is None


@pytest.mark.parametrize("current,target", [(S, F), (F, S)])
def test_terminal_swap_is_applied(current, target):
    outcome = transition(current, target, subject_id="step-1")

    assert outcome.kind is TransitionKind.APPLIED
    assert outcome.status is target
    assert outcome.conflict is None


@pytest.mark.parametrize("status", [P, R, S, F])
def test_replay_is_ignored(status):
    outcome = transition(status, status)

    assert outcome.kind is TransitionKind.IGNORED
    assert outcome.status is status


@pytest.mark.parametrize(
    "current,target,reason",
    [
        (S, R, "backward"),
        (F, P, "backward"),
        (R, P, "backward"),
    ],
)
def test_backward_is_conflict(current, target, reason):
    """
    Verifica que o estado armazenado permanece o atual em caso de conflito.

    O conflito carrega os dois estados e vira payload `STATUS_CONFLICT`.
    """
    outcome = transition(current, target, subject_id="step-1")

    assert outcome.kind is TransitionKind.CONFLICT
    assert outcome.status is current
    assert outcome.conflict.reason == reason
    payload = outcome.conflict.to_payload()
    assert payload.type == "STATUS_CONFLICT"
    assert payload.details == {"subject_id": "step-1", "current": current.value, "attempted": target.value}
    assert payload.decision_required is False


@pytest.mark.parametrize(
    "steps,expected",
    [
        ([S, R, P], R),
        ([S, F, P], F),
        ([S, S, S], S),
        ([P, P, P], P),
        ([], P),
        ([S, P], R),
        ([R, F], F),
        (["success", "running"], R),
    ],
)
def test_derive_pipeline_status(steps, expected):
    assert derive_pipeline_status(steps) is expected


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("SUCCEEDED", S),
        ("FAILED", F),
        ("STOPPED", F),
        ("TIMED_OUT", F),
        ("FAULT", F),
        ("IN_PROGRESS", R),
        ("QUEUED", P),
        ("SUBMITTED", P),
        ("pending", P),
        ("running", R),
        ("success", S),
        ("failed", F),
        ("in_progress", R),
        ("UNHEARD_OF", None),
        (None, None),
        (3, None),
    ],
)
def test_status_from_remote(raw, expected):
    assert status_from_remote(raw) is expected


def test_parse_rejects_unknown_status():
    with pytest.raises(ValueError):
        ExecutionStatus.parse("archived")
