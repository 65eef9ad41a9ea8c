# src/otto_flow/core/logs/types.py
"""
Tipos canônicos de registros de log/build.

Componentes principais:
    - Severity  → DEBUG, INFO, WARN, ERROR, UNKNOWN
    - Phase     → fases do serviço de build (INSTALL, PRE_BUILD, ...)
    - LogRecord → um registro imutável correlacionável por projeto,
                  pipeline, estágio e build

Formato de entrada aceito por `LogRecord.from_dict`:
    - chaves snake_case (`pipeline_id`) ou camelCase (`pipelineId`)
    - timestamp ISO-8601 (com `Z` ou offset) ou epoch em milissegundos
    - severidade em `severity` ou `level`

Invariantes:
    - Todo timestamp é timezone-aware em UTC
    - `record_id` é obrigatório (desempate de ordenação)

Limites explícitos:
    - Não agrupa nem filtra (ver `correlator`)
    - Não interpreta texto de log bruto (ver `normalize`)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from otto_flow.core.lifecycle.types import ExecutionStatus, status_from_remote


class Severity(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Any) -> "Severity":
        if isinstance(value, Severity):
            return value
        if isinstance(value, str):
            raw = value.strip().upper()
            if raw == "WARNING":
                return cls.WARN
            if raw == "FATAL":
                return cls.ERROR
            for sev in cls:
                if sev.value == raw:
                    return sev
        return cls.UNKNOWN


class Phase(str, Enum):
    INSTALL = "INSTALL"
    PRE_BUILD = "PRE_BUILD"
    BUILD = "BUILD"
    POST_BUILD = "POST_BUILD"
    FINALIZE = "FINALIZE"

    @classmethod
    def parse(cls, value: Any) -> Optional["Phase"]:
        if isinstance(value, Phase):
            return value
        if not isinstance(value, str):
            return None
        raw = value.strip().upper().replace("-", "_")
        if raw == "FINALIZING":
            return cls.FINALIZE
        for phase in cls:
            if phase.value == raw:
                return phase
        return None


def to_utc(value: Any) -> datetime:
    """
    Converte um timestamp (datetime, ISO-8601 ou epoch ms) para datetime UTC.

    Raises:
        ValueError: Se o valor não puder ser interpretado.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, bool):
        raise ValueError(f"Invalid timestamp: {value!r}")
    elif isinstance(value, (int, float)):
        dt = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    elif isinstance(value, str) and value.strip():
        raw = value.strip()
        if raw.isdigit():
            return to_utc(int(raw))
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        dt = datetime.fromisoformat(raw)
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _pick(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


@dataclass(frozen=True)
class LogRecord:
    """
    Registro de log/build correlacionável.

    Campos:
        - record_id: identificador único (desempate na ordenação)
        - project_id / pipeline_id: escopo de correlação
        - step_id: estágio de origem (opcional)
        - build_id: build que produziu o registro
        - timestamp: instante UTC
        - severity: nível do registro
        - status: status de execução associado (opcional)
        - message: texto livre
        - phase: fase do build (opcional)
    """
    record_id: str
    project_id: str
    pipeline_id: str
    build_id: str
    timestamp: datetime
    message: str = ""
    severity: Severity = Severity.UNKNOWN
    status: Optional[ExecutionStatus] = None
    step_id: Optional[str] = None
    phase: Optional[Phase] = None

    @property
    def sort_key(self):
        return (self.timestamp, self.record_id)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "LogRecord":
        """
        Constrói um registro a partir do JSON da API de logs.

        Raises:
            ValueError: Se `record_id`/`id` ou o timestamp estiverem ausentes
                ou inválidos.
        """
        record_id = _pick(raw, "record_id", "recordId", "id")
        if record_id is None or not str(record_id).strip():
            raise ValueError("log record requires a record_id")
        timestamp = _pick(raw, "timestamp", "ts", "time")
        if timestamp is None:
            raise ValueError(f"log record {record_id!r} has no timestamp")

        return cls(
            record_id=str(record_id),
            project_id=str(_pick(raw, "project_id", "projectId") or ""),
            pipeline_id=str(_pick(raw, "pipeline_id", "pipelineId") or ""),
            build_id=str(_pick(raw, "build_id", "buildId") or ""),
            timestamp=to_utc(timestamp),
            message=str(_pick(raw, "message") or ""),
            severity=Severity.parse(_pick(raw, "severity", "level")),
            status=status_from_remote(_pick(raw, "status")),
            step_id=_pick(raw, "step_id", "stepId"),
            phase=Phase.parse(_pick(raw, "phase")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record_id": self.record_id,
            "project_id": self.project_id,
            "pipeline_id": self.pipeline_id,
            "step_id": self.step_id,
            "build_id": self.build_id,
            "timestamp": self.timestamp.isoformat(),
            "severity": self.severity.value,
            "status": self.status.value if self.status is not None else None,
            "message": self.message,
            "phase": self.phase.value if self.phase is not None else None,
        }
