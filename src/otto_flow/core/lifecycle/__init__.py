# src/otto_flow/core/lifecycle/__init__.py
"""
Ciclo de vida de status (pending → running → success/failed).

Componentes:
    - types     → ExecutionStatus e tradução do vocabulário remoto
    - lifecycle → transições, derivação, Execution e sequenciamento
"""

from .lifecycle import (
    BuildSnapshot,
    Execution,
    StatusConflict,
    StatusUpdateSequencer,
    TransitionKind,
    TransitionOutcome,
    derive_pipeline_status,
    snapshot_from_mapping,
    transition,
)
from .types import ExecutionStatus, status_from_remote

__all__ = [
    "BuildSnapshot",
    "Execution",
    "StatusConflict",
    "StatusUpdateSequencer",
    "TransitionKind",
    "TransitionOutcome",
    "derive_pipeline_status",
    "snapshot_from_mapping",
    "transition",
    "ExecutionStatus",
    "status_from_remote",
]
