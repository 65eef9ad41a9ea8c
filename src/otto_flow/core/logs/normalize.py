# src/otto_flow/core/logs/normalize.py
"""
Normalização de eventos brutos do serviço de build e utilitários de leitura.

O serviço de build entrega eventos `{timestamp (epoch ms), message}` sem
nível nem fase. Este módulo os transforma em `LogRecord`s:

    - severidade detectada por marcadores no texto
    - fase corrente detectada por linhas `Entering phase X` /
      `Phase complete: X` e propagada às linhas seguintes
    - duplicatas por (timestamp, message) descartadas
    - ordenação ascendente por timestamp (estável)

Também oferece:
    - timeline_range → intervalo de tempo para os rótulos de timeline da UI
    - error_lines / error_context / preview → leitura centrada em erros

Limites explícitos:
    - Não faz streaming nem reconexão (camada de transporte)
    - Não persiste registros
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from .types import LogRecord, Phase, Severity, to_utc

_ERROR_RE = re.compile(r"\[(ERROR|FATAL)\]|error:|exception:|failed:", re.IGNORECASE)
_WARN_RE = re.compile(r"\[WARN(ING)?\]|warning:|\bwarn\b", re.IGNORECASE)
_DEBUG_RE = re.compile(r"\[DEBUG\]", re.IGNORECASE)
_INFO_RE = re.compile(r"\[INFO\]", re.IGNORECASE)
_PHASE_RE = re.compile(r"(?:Entering phase|Phase complete:)\s+([A-Z_]+)", re.IGNORECASE)


@dataclass(frozen=True)
class LogContext:
    """Escopo atribuído a todos os registros de um build."""
    project_id: str
    pipeline_id: str
    step_id: Optional[str] = None


def detect_severity(message: str) -> Severity:
    if _ERROR_RE.search(message):
        return Severity.ERROR
    if _WARN_RE.search(message):
        return Severity.WARN
    if _DEBUG_RE.search(message):
        return Severity.DEBUG
    if _INFO_RE.search(message):
        return Severity.INFO
    return Severity.UNKNOWN


def detect_phase(message: str) -> Optional[Phase]:
    match = _PHASE_RE.search(message)
    if not match:
        return None
    return Phase.parse(match.group(1))


def normalize_raw_events(
    build_id: str,
    events: Iterable[Mapping[str, Any]],
    *,
    context: LogContext,
) -> List[LogRecord]:
    """
    Converte eventos brutos de um build em registros ordenados e sem duplicatas.

    Args:
        build_id: Build de origem dos eventos.
        events: Eventos `{timestamp, message}` em qualquer ordem de chegada.
        context: Projeto/pipeline/estágio atribuídos aos registros.

    Returns:
        List[LogRecord]: Registros em ordem ascendente de timestamp, com
        `record_id` = `<build_id>:<posição>`.

    Raises:
        ValueError: Se algum evento não possuir timestamp válido.
    """
    seen = set()
    unique: List[Tuple[datetime, str]] = []
    for event in events:
        message = str(event.get("message") or "").rstrip("\n")
        ts = to_utc(event.get("timestamp", event.get("ts")))
        key = (ts, message)
        if key in seen:
            continue
        seen.add(key)
        unique.append(key)

    unique.sort(key=lambda item: item[0])

    records: List[LogRecord] = []
    phase: Optional[Phase] = None
    for index, (ts, message) in enumerate(unique):
        phase = detect_phase(message) or phase
        records.append(LogRecord(
            record_id=f"{build_id}:{index:06d}",
            project_id=context.project_id,
            pipeline_id=context.pipeline_id,
            step_id=context.step_id,
            build_id=build_id,
            timestamp=ts,
            message=message,
            severity=detect_severity(message),
            phase=phase,
        ))
    return records


# -----------------------------
# Timeline
# -----------------------------

_TIMELINE_WINDOWS = {
    "last-hour": timedelta(hours=1),
    "last-24h": timedelta(hours=24),
    "today": timedelta(hours=24),
    "last-7d": timedelta(days=7),
    "week": timedelta(days=7),
    "last-30d": timedelta(days=30),
    "month": timedelta(days=30),
}

TIMELINE_LABELS = ("all-time",) + tuple(_TIMELINE_WINDOWS)


def timeline_range(label: str, now: Optional[datetime] = None) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Resolve um rótulo de timeline em um intervalo (since, until).

    `all-time` não restringe: retorna (None, None).

    Raises:
        ValueError: Para rótulos desconhecidos.
    """
    if label == "all-time":
        return None, None
    window = _TIMELINE_WINDOWS.get(label)
    if window is None:
        raise ValueError(f"Unknown timeline label: {label!r}")
    until = to_utc(now) if now is not None else datetime.now(timezone.utc)
    return until - window, until


# -----------------------------
# Leitura centrada em erros
# -----------------------------

@dataclass(frozen=True)
class ContextLine:
    line_number: int
    record: LogRecord
    is_error: bool


def error_lines(records: Sequence[LogRecord]) -> List[int]:
    """Índices dos registros com severidade ERROR."""
    return [i for i, r in enumerate(records) if r.severity is Severity.ERROR]


def error_context(records: Sequence[LogRecord], index: int, context_lines: int = 3) -> List[ContextLine]:
    """Janela de `context_lines` registros antes e depois de `index` (numeração a partir de 1)."""
    if not 0 <= index < len(records):
        raise IndexError(f"record index out of range: {index}")
    start = max(0, index - context_lines)
    end = min(len(records), index + context_lines + 1)
    return [
        ContextLine(line_number=i + 1, record=records[i], is_error=i == index)
        for i in range(start, end)
    ]


def preview(records: Sequence[LogRecord], max_lines: int = 10) -> List[LogRecord]:
    """
    Prévia curta de um log.

    Com erros, a janela é centrada no último erro; sem erros, são as
    últimas `max_lines` linhas.
    """
    if len(records) <= max_lines:
        return list(records)
    errors = error_lines(records)
    if errors:
        start = max(0, errors[-1] - max_lines // 2)
        start = min(start, len(records) - max_lines)
        return list(records[start:start + max_lines])
    return list(records[-max_lines:])
