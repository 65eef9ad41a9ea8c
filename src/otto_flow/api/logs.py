# src/otto_flow/api/logs.py
"""
Client da API de consulta de logs/builds.

Rota (relativa ao prefixo da API):
    - GET /logs?project_id=&since=&until=&status=

O escopo `"all"` não envia `project_id`. A resposta é uma lista de
registros (ou um objeto com `logs`/`records`/`data`). Os registros são
convertidos em `LogRecord` e classificados localmente por
`correlator.query`, que também reaplica os filtros: o resultado não
depende de o backend honrar todos os parâmetros.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from otto_flow.core.errors import remote_failure
from otto_flow.core.exceptions import RemoteFailure
from otto_flow.core.identifiers import normalize_project_id
from otto_flow.core.logs import ALL_SCOPE, LogFilter, LogQueryResult, LogRecord, ScopeKind, query, timeline_range

from .client import ApiClient

logger = logging.getLogger(__name__)


def _extract_records(body: Any) -> Optional[List[Any]]:
    if body is None:
        return []
    if isinstance(body, list):
        return body
    if isinstance(body, dict):
        for key in ("logs", "records", "data"):
            if isinstance(body.get(key), list):
                return body[key]
    return None


class LogQueryClient:
    def __init__(self, api: ApiClient, *, default_timeline: str = "all-time"):
        self.api = api
        self.default_timeline = default_timeline

    def fetch(
        self,
        scope: str = ALL_SCOPE,
        *,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        statuses: Optional[Iterable[Any]] = None,
        text: Optional[str] = None,
        timeline: Optional[str] = None,
    ) -> LogQueryResult:
        """
        Busca registros de um escopo de projeto e os classifica.

        `timeline` (ex.: `last-24h`) é usado quando `since`/`until` não são
        informados; na ausência de ambos vale `default_timeline`.

        Returns:
            LogQueryResult: `LogRecords` ou `NoData` (escopo vazio não é erro).

        Raises:
            AuthenticationRequired / RemoteFailure: Falhas da fronteira remota.
        """
        if since is None and until is None:
            since, until = timeline_range(timeline or self.default_timeline)
        log_filter = LogFilter.build(statuses=statuses, since=since, until=until, text=text)

        params: Dict[str, Any] = {}
        if scope != ALL_SCOPE:
            params["project_id"] = normalize_project_id(scope)
        if log_filter.since is not None:
            params["since"] = log_filter.since.isoformat()
        if log_filter.until is not None:
            params["until"] = log_filter.until.isoformat()
        if log_filter.statuses:
            params["status"] = ",".join(sorted(s.value for s in log_filter.statuses))

        body = self.api.request("GET", "logs", params=params)
        raw_records = _extract_records(body)
        if raw_records is None:
            raise RemoteFailure.from_payload(
                remote_failure(endpoint=self.api.endpoint("logs"), reason="unexpected_payload")
            )

        try:
            records = [LogRecord.from_dict(r) for r in raw_records]
        except (TypeError, ValueError, AttributeError) as e:
            logger.error("Malformed log record in response: %s", e)
            raise RemoteFailure.from_payload(
                remote_failure(endpoint=self.api.endpoint("logs"), reason=f"malformed_record: {e}")
            ) from e

        logger.debug("Fetched %d log records for scope %s", len(records), scope)
        return query(records, scope, log_filter, scope_kind=ScopeKind.PROJECT)
