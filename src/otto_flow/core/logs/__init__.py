# src/otto_flow/core/logs/__init__.py
"""
Correlação de logs/builds.

Componentes:
    - types      → Severity, Phase, LogRecord
    - correlator → group_by_pipeline, LogFilter, filter_records, query
    - normalize  → eventos brutos → LogRecord, timeline, leitura de erros
    - analytics  → resumo por pipeline em DataFrame
"""

from .analytics import SUMMARY_COLUMNS, summarize
from .correlator import (
    ALL_SCOPE,
    LogFilter,
    LogQueryResult,
    LogRecords,
    NoData,
    ScopeKind,
    filter_records,
    group_by_pipeline,
    query,
)
from .normalize import (
    TIMELINE_LABELS,
    ContextLine,
    LogContext,
    detect_phase,
    detect_severity,
    error_context,
    error_lines,
    normalize_raw_events,
    preview,
    timeline_range,
)
from .types import LogRecord, Phase, Severity, to_utc

__all__ = [
    "SUMMARY_COLUMNS",
    "summarize",
    "ALL_SCOPE",
    "LogFilter",
    "LogQueryResult",
    "LogRecords",
    "NoData",
    "ScopeKind",
    "filter_records",
    "group_by_pipeline",
    "query",
    "TIMELINE_LABELS",
    "ContextLine",
    "LogContext",
    "detect_phase",
    "detect_severity",
    "error_context",
    "error_lines",
    "normalize_raw_events",
    "preview",
    "timeline_range",
    "LogRecord",
    "Phase",
    "Severity",
    "to_utc",
]
