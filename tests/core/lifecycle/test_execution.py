# tests/core/lifecycle/test_execution.py
"""
Testes da Execution: aplicação de updates, log de eventos e re-run.

Este módulo valida o comportamento de uma execução (build) ao receber
eventos de status fora de ordem vindos do serviço remoto.

Os testes asseguram que:
- `success -> running` na mesma execução é rejeitado e o estado fica `success`
- `success -> failed` é aplicado: o último terminal vence e o anterior fica no log
- conflitos são registrados no log com nível `warning` e não levantam
- o status do pipeline é recomputado a cada update aplicado
- cancelamento força `failed` apenas em estágios não terminais
- re-run cria nova execução sem tocar o histórico terminal
- estágio desconhecido é violação de invariante

Decisões arquiteturais:
    - Eventos seguem o formato estruturado (execution_id, step_id, level,
      message, timestamp, extras)

Limites explícitos:
    - Não valida concorrência real (ver test_sequencer.py)
"""

import pytest

try:
    from otto_flow.core.exceptions import InvariantViolation
    from otto_flow.core.lifecycle import (
        BuildSnapshot,
        Execution,
        ExecutionStatus,
        TransitionKind,
        snapshot_from_mapping,
    )
except Exception as e:  # noqa: BLE001
    Execution = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing lifecycle module. Implement:\n"
            "- src/otto_flow/core/lifecycle/lifecycle.py (Execution)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def _execution():
    return Execution(pipeline_id="pipe_1", step_ids=["build", "test", "deploy"], execution_id="ex-1")


def test_new_execution_is_pending():
    _require_imports()

    ex = _execution()

    assert ex.status is ExecutionStatus.PENDING
    assert ex.steps == {s: ExecutionStatus.PENDING for s in ("build", "test", "deploy")}
    assert ex.events == []


def test_in_order_updates_and_late_running_after_success():
    """
    Verifica a sequência pending -> running -> success e um replay tardio.

    Um `running` duplicado após `success` é conflito: o estágio
    permanece `success` e o conflito fica registrado.
    """
    _require_imports()

    ex = _execution()

    assert ex.apply_step_update("build", "running").applied
    assert ex.status is ExecutionStatus.RUNNING
    assert ex.apply_step_update("build", ExecutionStatus.SUCCESS).applied

    late = ex.apply_step_update("build", "running", at="2025-03-01T12:00:05Z")

    assert late.kind is TransitionKind.CONFLICT
    assert ex.steps["build"] is ExecutionStatus.SUCCESS
    assert len(ex.conflicts) == 1
    warning = ex.events[-1]
    assert warning["level"] == "warning"
    assert warning["message"] == "status_conflict"
    assert warning["execution_id"] == "ex-1"
    assert warning["step_id"] == "build"
    assert warning["at"] == "2025-03-01T12:00:05Z"
    assert warning["from"] == "success" and warning["to"] == "running"


def test_replay_is_idempotent():
    _require_imports()

    ex = _execution()
    ex.apply_step_update("build", "running")
    snapshot = ex.to_dict()

    outcome = ex.apply_step_update("build", "IN_PROGRESS")

    assert outcome.kind is TransitionKind.IGNORED
    assert ex.to_dict() == snapshot
    assert ex.conflicts == []


def test_pipeline_status_is_recomputed_on_every_update():
    _require_imports()

    ex = _execution()
    seen = []
    for step, status in [("build", "running"), ("build", "success"), ("test", "running"), ("test", "failed")]:
        ex.apply_step_update(step, status)
        seen.append(ex.status)

    assert seen == [
        ExecutionStatus.RUNNING,
        ExecutionStatus.RUNNING,
        ExecutionStatus.RUNNING,
        ExecutionStatus.FAILED,
    ]
    # curto-circuito: os demais estágios mantêm o último estado conhecido
    assert ex.steps["deploy"] is ExecutionStatus.PENDING
    changes = [e for e in ex.events if e["message"] == "pipeline_status_changed"]
    assert [(e["from"], e["to"]) for e in changes] == [("pending", "running"), ("running", "failed")]
    assert all(e["step_id"] is None for e in changes)


def test_last_terminal_wins_within_execution():
    """O terminal mais recente substitui o anterior e o valor antigo fica no log."""
    _require_imports()

    ex = _execution()
    ex.apply_step_update("test", "running")
    ex.apply_step_update("test", "success")
    outcome = ex.apply_step_update("test", "failed")

    assert outcome.kind is TransitionKind.APPLIED
    assert ex.steps["test"] is ExecutionStatus.FAILED
    assert ex.status is ExecutionStatus.FAILED
    assert ex.conflicts == []
    superseded = [e for e in ex.events if e["message"] == "step_terminal_superseded"]
    assert len(superseded) == 1
    assert superseded[0]["superseded"] == "success"
    assert superseded[0]["to"] == "failed"
    assert superseded[0]["level"] == "warning"

    ex.apply_step_update("test", "success")
    assert ex.steps["test"] is ExecutionStatus.SUCCESS
    assert ex.status is ExecutionStatus.RUNNING


def test_unknown_step_is_invariant_violation():
    _require_imports()

    ex = _execution()

    with pytest.raises(InvariantViolation) as exc:
        ex.apply_step_update("lint", "running")

    assert exc.value.details["step_id"] == "lint"
    assert ex.events == []


def test_duplicate_step_ids_are_rejected():
    _require_imports()

    with pytest.raises(ValueError):
        Execution(pipeline_id="p", step_ids=["a", "a"])


def test_apply_build_snapshot():
    """
    Verifica a aplicação de um snapshot remoto completo.

    Decisões:
        - O build id do snapshot é adotado quando a execução ainda não tem um
        - Snapshot de outro build, ou com estágio desconhecido, falha sem
          alterar a execução
    """
    _require_imports()

    ex = _execution()
    snap = snapshot_from_mapping("b-9", "IN_PROGRESS", {"build": "SUCCEEDED", "test": "IN_PROGRESS"})
    outcomes = ex.apply_build_snapshot(snap)

    assert ex.build_id == "b-9"
    assert [o.kind for o in outcomes] == [TransitionKind.APPLIED, TransitionKind.APPLIED]
    assert ex.steps["build"] is ExecutionStatus.SUCCESS
    assert ex.steps["test"] is ExecutionStatus.RUNNING
    assert ex.status is ExecutionStatus.RUNNING

    before = ex.to_dict()
    with pytest.raises(InvariantViolation):
        ex.apply_build_snapshot(BuildSnapshot(build_id="other", status=ExecutionStatus.RUNNING))
    with pytest.raises(InvariantViolation):
        ex.apply_build_snapshot(snapshot_from_mapping("b-9", "IN_PROGRESS", {"deploy": "SUCCEEDED", "lint": "FAILED"}))
    assert ex.to_dict() == before


def test_cancel_forces_failed_on_non_terminal_steps():
    _require_imports()

    ex = _execution()
    ex.apply_step_update("build", "success")
    ex.apply_step_update("test", "running")

    forced = ex.cancel(reason="user cancelled")

    assert forced == ["test", "deploy"]
    assert ex.steps == {
        "build": ExecutionStatus.SUCCESS,
        "test": ExecutionStatus.FAILED,
        "deploy": ExecutionStatus.FAILED,
    }
    assert ex.status is ExecutionStatus.FAILED
    cancelled = next(e for e in ex.events if e["message"] == "execution_cancelled")
    assert cancelled["reason"] == "user cancelled"


def test_rerun_creates_new_execution():
    _require_imports()

    ex = _execution()
    for step in ex.step_ids:
        ex.apply_step_update(step, "success")
    assert ex.status is ExecutionStatus.SUCCESS

    again = ex.rerun()

    assert again.execution_id != ex.execution_id
    assert again.previous_execution_id == "ex-1"
    assert again.attempt == 2
    assert again.status is ExecutionStatus.PENDING
    assert again.build_id is None
    # histórico terminal intacto
    assert ex.status is ExecutionStatus.SUCCESS
    assert again.apply_step_update("build", "running").applied
    assert ex.steps["build"] is ExecutionStatus.SUCCESS
