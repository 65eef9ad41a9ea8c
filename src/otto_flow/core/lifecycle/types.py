# src/otto_flow/core/lifecycle/types.py
"""
Tipos canônicos do ciclo de vida de execução.

Este módulo define os estados compartilhados por Pipeline e PipelineStep
e o mapeamento do vocabulário de status do serviço de build remoto para
esses estados.

Componentes principais:
    - ExecutionStatus     → pending, running, success, failed
    - status_from_remote  → tradução do vocabulário remoto (SUCCEEDED, ...)

Princípios fundamentais:
    - Rank monotônico: pending=0 < running=1 < success/failed=2
    - success e failed são terminais e mutuamente exclusivos
    - Nenhuma regra de transição vive neste módulo (ver `lifecycle`)

Limites explícitos:
    - Não aplica transições
    - Não deriva status de pipeline
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ExecutionStatus(str, Enum):
    """
    Estados de execução de um pipeline ou estágio.

    Os valores são strings para facilitar:
        - serialização em JSON
        - leitura direta das entidades persistidas

    Invariantes:
        - O rank nunca decresce dentro de uma mesma execução
        - Um estado terminal só é substituído por um re-run (nova execução)
    """
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    @property
    def is_terminal(self) -> bool:
        return self.rank == 2

    @classmethod
    def parse(cls, value: Any) -> "ExecutionStatus":
        if isinstance(value, ExecutionStatus):
            return value
        status = status_from_remote(value)
        if status is None:
            raise ValueError(f"Unknown execution status: {value!r}")
        return status


_RANKS = {
    ExecutionStatus.PENDING: 0,
    ExecutionStatus.RUNNING: 1,
    ExecutionStatus.SUCCESS: 2,
    ExecutionStatus.FAILED: 2,
}

# vocabulário do serviço de build (CodeBuild-like)
_REMOTE_STATUSES: Dict[str, ExecutionStatus] = {
    "SUCCEEDED": ExecutionStatus.SUCCESS,
    "FAILED": ExecutionStatus.FAILED,
    "FAULT": ExecutionStatus.FAILED,
    "STOPPED": ExecutionStatus.FAILED,
    "TIMED_OUT": ExecutionStatus.FAILED,
    "IN_PROGRESS": ExecutionStatus.RUNNING,
    "QUEUED": ExecutionStatus.PENDING,
    "PENDING": ExecutionStatus.PENDING,
    "SUBMITTED": ExecutionStatus.PENDING,
}


def status_from_remote(value: Any) -> Optional[ExecutionStatus]:
    """
    Traduz um status do serviço remoto para `ExecutionStatus`.

    Aceita tanto o vocabulário remoto em maiúsculas (`SUCCEEDED`,
    `IN_PROGRESS`, `TIMED_OUT`, ...) quanto os quatro nomes canônicos em
    minúsculas.

    Returns:
        Optional[ExecutionStatus]: O estado correspondente, ou `None` para
        valores desconhecidos (o chamador decide se ignora ou falha).
    """
    if isinstance(value, ExecutionStatus):
        return value
    if not isinstance(value, str):
        return None
    raw = value.strip()
    for status in ExecutionStatus:
        if status.value == raw:
            return status
    return _REMOTE_STATUSES.get(raw.upper())
