# src/otto_flow/core/logs/correlator.py
"""
Correlator de logs: visões de consulta sobre registros de log/build.

Dado um conjunto de `LogRecord`s, este módulo produz três visões sem
mutar a fonte:

    - group_by_pipeline → pipeline_id → registros em ordem temporal
    - filter_records    → subsequência que atende aos predicados
    - query             → classificação de escopo: `LogRecords` ou `NoData`

Decisões arquiteturais:
    - Ordenação estável por (timestamp, record_id) no momento da leitura;
      a ordem de chegada não importa
    - Filtros preservam a ordem original da entrada
    - Escopo vazio é um VALOR (`NoData`), não um erro, para que o chamador
      exiba uma mensagem específica do escopo

Invariantes:
    - A entrada nunca é mutada
    - Dentro de um pipeline, timestamps nunca decrescem

Limites explícitos:
    - Não busca registros remotamente (ver `otto_flow.api.logs`)
    - Não agrega métricas (ver `analytics`)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Union

from otto_flow.core.identifiers import normalize_pipeline_id, normalize_project_id
from otto_flow.core.lifecycle.types import ExecutionStatus

from .types import LogRecord, to_utc

ALL_SCOPE = "all"


class ScopeKind(str, Enum):
    PROJECT = "project"
    PIPELINE = "pipeline"


def group_by_pipeline(records: Iterable[LogRecord]) -> Dict[str, List[LogRecord]]:
    """
    Agrupa registros por pipeline, cada grupo ordenado por (timestamp, record_id).

    As chaves aparecem na ordem da primeira ocorrência de cada pipeline.
    """
    groups: Dict[str, List[LogRecord]] = {}
    for record in records:
        groups.setdefault(record.pipeline_id, []).append(record)
    return {pid: sorted(items, key=lambda r: r.sort_key) for pid, items in groups.items()}


@dataclass(frozen=True)
class LogFilter:
    """
    Predicados de filtragem (todos opcionais, combinados com AND).

    Campos:
        - statuses: conjunto de status aceitos (None = qualquer status)
        - since / until: intervalo de tempo inclusivo
        - text: substring buscada na mensagem, sem diferenciar maiúsculas
    """
    statuses: Optional[FrozenSet[ExecutionStatus]] = None
    since: Optional[datetime] = None
    until: Optional[datetime] = None
    text: Optional[str] = None

    @classmethod
    def build(
        cls,
        *,
        statuses: Optional[Iterable[Any]] = None,
        since: Any = None,
        until: Any = None,
        text: Optional[str] = None,
    ) -> "LogFilter":
        """Constrói um filtro aceitando strings de status e timestamps em qualquer formato suportado."""
        return cls(
            statuses=frozenset(ExecutionStatus.parse(s) for s in statuses) if statuses is not None else None,
            since=to_utc(since) if since is not None else None,
            until=to_utc(until) if until is not None else None,
            text=text or None,
        )

    def matches(self, record: LogRecord) -> bool:
        if self.statuses is not None and record.status not in self.statuses:
            return False
        if self.since is not None and record.timestamp < to_utc(self.since):
            return False
        if self.until is not None and record.timestamp > to_utc(self.until):
            return False
        if self.text and self.text.casefold() not in record.message.casefold():
            return False
        return True


def filter_records(records: Iterable[LogRecord], log_filter: Optional[LogFilter] = None) -> List[LogRecord]:
    """Subsequência de `records` aceita por `log_filter`, na ordem original."""
    if log_filter is None:
        return list(records)
    return [r for r in records if log_filter.matches(r)]


# -----------------------------
# Resultado de consulta
# -----------------------------

@dataclass(frozen=True)
class LogRecords:
    """Escopo com registros: lista filtrada (ordem original) e agrupamento por pipeline."""
    scope: str
    scope_kind: ScopeKind
    records: List[LogRecord] = field(default_factory=list)
    by_pipeline: Dict[str, List[LogRecord]] = field(default_factory=dict)


@dataclass(frozen=True)
class NoData:
    """
    Escopo sem registros.

    `filtered=True` indica que o escopo possui registros, mas nenhum
    atende ao filtro aplicado.
    """
    scope: str
    scope_kind: ScopeKind
    filtered: bool = False


LogQueryResult = Union[LogRecords, NoData]


def _in_scope(record: LogRecord, scope: str, kind: ScopeKind) -> bool:
    if scope == ALL_SCOPE:
        return True
    if kind is ScopeKind.PIPELINE:
        return normalize_pipeline_id(record.pipeline_id) == scope
    return normalize_project_id(record.project_id) == scope


def query(
    records: Sequence[LogRecord],
    scope: str = ALL_SCOPE,
    log_filter: Optional[LogFilter] = None,
    *,
    scope_kind: Union[ScopeKind, str] = ScopeKind.PROJECT,
) -> LogQueryResult:
    """
    Consulta registros de um escopo (`"all"`, um projeto ou um pipeline).

    Ids curtos no escopo são normalizados para a forma canônica antes da
    comparação.

    Returns:
        LogQueryResult: `LogRecords` quando há registros após o filtro;
        `NoData` caso contrário.
    """
    kind = ScopeKind(scope_kind)
    if scope != ALL_SCOPE:
        scope = normalize_pipeline_id(scope) if kind is ScopeKind.PIPELINE else normalize_project_id(scope)

    scoped = [r for r in records if _in_scope(r, scope, kind)]
    if not scoped:
        return NoData(scope=scope, scope_kind=kind)

    matched = filter_records(scoped, log_filter)
    if not matched:
        return NoData(scope=scope, scope_kind=kind, filtered=True)

    return LogRecords(
        scope=scope,
        scope_kind=kind,
        records=matched,
        by_pipeline=group_by_pipeline(matched),
    )
