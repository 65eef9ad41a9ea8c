# src/otto_flow/core/lifecycle/lifecycle.py
"""
Ciclo de vida de status de execução.

Este módulo concentra as regras de transição de status de estágios e a
derivação do status do pipeline a partir deles.

Componentes principais:
    - transition             → função pura que decide aplicar/ignorar/rejeitar
    - derive_pipeline_status → status do pipeline derivado dos estágios
    - Execution              → uma execução (build) com log de eventos
    - StatusUpdateSequencer  → serialização de updates por pipeline id

Regras de transição:
    - Avanço por rank (pending=0 < running=1 < terminal=2) é aplicado
    - Repetição do estado atual é no-op idempotente (replay)
    - Retrocesso é `StatusConflict` e não é aplicado
    - Terminal → outro terminal é aplicado: o último estado terminal
      vence, e o valor substituído fica registrado no log de eventos

Derivação do status do pipeline:
    - pending  → todos os estágios pending (ou nenhum estágio)
    - failed   → qualquer estágio failed (curto-circuito; os demais mantêm
      o último estado conhecido)
    - success  → todos os estágios success
    - running  → demais casos

Decisões arquiteturais:
    - Conflitos são VALORES registrados no log da execução, nunca exceções
    - Re-run cria uma nova `Execution`; o histórico terminal não é mutado
    - Cancelamento é um evento externo traduzido em `failed` forçado
      para os estágios ainda não terminais

Invariantes:
    - O status do pipeline é recomputado a cada update aplicado
    - O rank de um estágio nunca decresce dentro de uma execução
    - Eventos são registrados na ordem em que os updates chegam

Limites explícitos:
    - Não consulta o serviço de build
    - Não serializa updates concorrentes sozinha: o chamador usa
      `StatusUpdateSequencer` (ou equivalente) por pipeline id
"""

from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from otto_flow.core.errors import OttoErrorPayload, status_conflict
from otto_flow.core.exceptions import InvariantViolation

from .types import ExecutionStatus


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# -----------------------------
# Transição pura
# -----------------------------

class TransitionKind(str, Enum):
    APPLIED = "applied"
    IGNORED = "ignored"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class StatusConflict:
    """
    Update de status rejeitado por violar a monotonicidade.

    Nunca é exibido como falha ao usuário: é registrado e descartado.
    """
    subject_id: str
    current: ExecutionStatus
    attempted: ExecutionStatus
    reason: str

    def to_payload(self) -> OttoErrorPayload:
        return status_conflict(
            subject_id=self.subject_id,
            current=self.current.value,
            attempted=self.attempted.value,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subject_id": self.subject_id,
            "current": self.current.value,
            "attempted": self.attempted.value,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class TransitionOutcome:
    """Resultado de `transition`: o estado resultante e, se houver, o conflito."""
    kind: TransitionKind
    status: ExecutionStatus
    conflict: Optional[StatusConflict] = None

    @property
    def applied(self) -> bool:
        return self.kind is TransitionKind.APPLIED


def transition(
    current: ExecutionStatus,
    target: ExecutionStatus,
    *,
    subject_id: str = "",
) -> TransitionOutcome:
    """
    Decide o efeito de mover `current` para `target`.

    Returns:
        TransitionOutcome: `applied` com o novo estado, `ignored` para
        replay do mesmo estado, ou `conflict` mantendo `current`.
    """
    if target is current:
        return TransitionOutcome(kind=TransitionKind.IGNORED, status=current)

    # terminal → terminal: o último vence
    if target.rank > current.rank or (current.is_terminal and target.is_terminal):
        return TransitionOutcome(kind=TransitionKind.APPLIED, status=target)

    return TransitionOutcome(
        kind=TransitionKind.CONFLICT,
        status=current,
        conflict=StatusConflict(
            subject_id=subject_id,
            current=current,
            attempted=target,
            reason="backward",
        ),
    )


def derive_pipeline_status(step_statuses: Iterable[Any]) -> ExecutionStatus:
    """Status do pipeline derivado dos status dos estágios (ver docstring do módulo)."""
    statuses = [ExecutionStatus.parse(s) for s in step_statuses]
    if any(s is ExecutionStatus.FAILED for s in statuses):
        return ExecutionStatus.FAILED
    if all(s is ExecutionStatus.PENDING for s in statuses):
        return ExecutionStatus.PENDING
    if all(s is ExecutionStatus.SUCCESS for s in statuses):
        return ExecutionStatus.SUCCESS
    return ExecutionStatus.RUNNING


# -----------------------------
# Execução
# -----------------------------

@dataclass(frozen=True)
class BuildSnapshot:
    """
    Fotografia do status remoto de um build.

    Campos:
        - build_id: id atribuído pelo serviço de build
        - status: status global reportado (já traduzido)
        - steps: status por estágio, na ordem reportada
    """
    build_id: str
    status: ExecutionStatus
    steps: Dict[str, ExecutionStatus] = field(default_factory=dict)


@dataclass
class Execution:
    """
    Uma execução (build) de um pipeline.

    A execução mantém o status de cada estágio, o status derivado do
    pipeline, os conflitos descartados e um log estruturado de eventos
    (dicts com `execution_id`, `step_id`, `level`, `message`,
    `timestamp` e campos extras).

    Invariantes:
        - `step_ids` não contém repetições
        - `status` é sempre `derive_pipeline_status` dos estágios
        - Uma instância nunca volta a um estado anterior; re-run gera
          uma nova instância
    """
    pipeline_id: str
    step_ids: List[str]
    execution_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    build_id: Optional[str] = None
    attempt: int = 1
    previous_execution_id: Optional[str] = None

    steps: Dict[str, ExecutionStatus] = field(init=False)
    status: ExecutionStatus = field(init=False)
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    conflicts: List[StatusConflict] = field(default_factory=list, init=False)

    def __post_init__(self) -> None:
        self.step_ids = list(self.step_ids)
        if len(set(self.step_ids)) != len(self.step_ids):
            raise ValueError("step_ids must be unique within an execution")
        self.steps = {sid: ExecutionStatus.PENDING for sid in self.step_ids}
        self.status = derive_pipeline_status(self.steps.values())

    # -----------------------------
    # Logging
    # -----------------------------
    def log(self, *, step_id: Optional[str], level: str, message: str, **extra: Any) -> None:
        event = {
            "execution_id": self.execution_id,
            "pipeline_id": self.pipeline_id,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": _utc_now_iso(),
        }
        event.update(extra)
        self.events.append(event)

    # -----------------------------
    # Updates
    # -----------------------------
    def _require_step(self, step_id: str) -> None:
        if step_id not in self.steps:
            raise InvariantViolation(
                message="Update de status para estágio desconhecido",
                details={
                    "execution_id": self.execution_id,
                    "pipeline_id": self.pipeline_id,
                    "step_id": step_id,
                },
            )

    def apply_step_update(
        self,
        step_id: str,
        status: Any,
        *,
        at: Optional[str] = None,
    ) -> TransitionOutcome:
        """
        Aplica um update de status a um estágio.

        Args:
            step_id: Estágio alvo (deve pertencer à execução).
            status: `ExecutionStatus` ou string (canônica ou vocabulário remoto).
            at: Timestamp do evento remoto, registrado no log quando informado.

        Returns:
            TransitionOutcome: O efeito do update.

        Raises:
            InvariantViolation: Se `step_id` não pertence à execução.
            ValueError: Se `status` não for reconhecido.
        """
        self._require_step(step_id)
        target = ExecutionStatus.parse(status)
        current = self.steps[step_id]
        outcome = transition(current, target, subject_id=step_id)
        extra: Dict[str, Any] = {"from": current.value, "to": target.value}
        if at is not None:
            extra["at"] = at

        if outcome.kind is TransitionKind.IGNORED:
            self.log(step_id=step_id, level="debug", message="step_status_replayed", **extra)
            return outcome

        if outcome.kind is TransitionKind.CONFLICT:
            assert outcome.conflict is not None
            self.conflicts.append(outcome.conflict)
            self.log(
                step_id=step_id,
                level="warning",
                message="status_conflict",
                reason=outcome.conflict.reason,
                **extra,
            )
            return outcome

        self.steps[step_id] = outcome.status
        if current.is_terminal:
            self.log(
                step_id=step_id,
                level="warning",
                message="step_terminal_superseded",
                superseded=current.value,
                **extra,
            )
        else:
            self.log(step_id=step_id, level="info", message="step_status_applied", **extra)
        self._recompute()
        return outcome

    def _recompute(self) -> None:
        derived = derive_pipeline_status(self.steps.values())
        if derived is not self.status:
            self.log(
                step_id=None,
                level="info",
                message="pipeline_status_changed",
                **{"from": self.status.value, "to": derived.value},
            )
            self.status = derived

    def apply_build_snapshot(self, snapshot: BuildSnapshot) -> List[TransitionOutcome]:
        """
        Aplica todos os status por estágio de um `BuildSnapshot`.

        O snapshot é conferido antes de qualquer aplicação: um build id
        diferente ou um estágio desconhecido levanta `InvariantViolation`
        sem alterar a execução.
        """
        if self.build_id is not None and snapshot.build_id != self.build_id:
            raise InvariantViolation(
                message="Snapshot pertence a outro build",
                details={
                    "execution_id": self.execution_id,
                    "expected_build_id": self.build_id,
                    "build_id": snapshot.build_id,
                },
            )
        for step_id in snapshot.steps:
            self._require_step(step_id)

        if self.build_id is None:
            self.build_id = snapshot.build_id
        return [self.apply_step_update(sid, st) for sid, st in snapshot.steps.items()]

    def cancel(self, *, reason: str) -> List[str]:
        """
        Traduz um cancelamento externo em `failed` forçado.

        Apenas estágios ainda não terminais são afetados; estágios já em
        success/failed mantêm seu estado.

        Returns:
            List[str]: Ids dos estágios forçados para `failed`, em ordem.
        """
        forced = [sid for sid in self.step_ids if not self.steps[sid].is_terminal]
        self.log(step_id=None, level="warning", message="execution_cancelled", reason=reason, steps=list(forced))
        for sid in forced:
            self.apply_step_update(sid, ExecutionStatus.FAILED)
        return forced

    def rerun(self) -> "Execution":
        """Cria uma nova execução do mesmo pipeline com todos os estágios pending."""
        return Execution(
            pipeline_id=self.pipeline_id,
            step_ids=list(self.step_ids),
            attempt=self.attempt + 1,
            previous_execution_id=self.execution_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "execution_id": self.execution_id,
            "pipeline_id": self.pipeline_id,
            "build_id": self.build_id,
            "attempt": self.attempt,
            "previous_execution_id": self.previous_execution_id,
            "status": self.status.value,
            "steps": {sid: self.steps[sid].value for sid in self.step_ids},
            "conflicts": [c.to_dict() for c in self.conflicts],
        }


# -----------------------------
# Sequenciamento por pipeline
# -----------------------------

class StatusUpdateSequencer:
    """
    Registro de locks por pipeline id.

    Garante no máximo um update de status em andamento por pipeline:

        with sequencer.hold(pipeline_id):
            execution.apply_step_update(...)

    Pipelines diferentes não se bloqueiam entre si.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def lock_for(self, pipeline_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(pipeline_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[pipeline_id] = lock
            return lock

    @contextmanager
    def hold(self, pipeline_id: str) -> Iterator[None]:
        with self.lock_for(pipeline_id):
            yield


def snapshot_from_mapping(build_id: str, status: Any, steps: Mapping[str, Any]) -> BuildSnapshot:
    """Constrói um `BuildSnapshot` traduzindo os status remotos."""
    return BuildSnapshot(
        build_id=build_id,
        status=ExecutionStatus.parse(status),
        steps={sid: ExecutionStatus.parse(st) for sid, st in steps.items()},
    )
