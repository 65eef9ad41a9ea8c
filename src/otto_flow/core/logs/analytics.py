"""Visão analítica de registros de log (v1).

Responsabilidades:
- Consolidar registros por pipeline em um `pandas.DataFrame`.
- Contar registros por status e erros por pipeline.
- Expor primeiro/último timestamp observado.

Princípios:
- OBSERVAR sem mutar: a entrada não é alterada.
- Saída determinística: uma linha por pipeline, ordenada por pipeline_id.

Limites explícitos (v1):
- NÃO calcula duração de builds.
- NÃO aplica filtros (ver `correlator.filter_records`).

Colunas:
  pipeline_id, records, errors, pending, running, success, failed,
  first_timestamp, last_timestamp
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

import pandas as pd

from otto_flow.core.lifecycle.types import ExecutionStatus

from .types import LogRecord, Severity

SUMMARY_COLUMNS = [
    "pipeline_id",
    "records",
    "errors",
    *[s.value for s in ExecutionStatus],
    "first_timestamp",
    "last_timestamp",
]


def summarize(records: Iterable[LogRecord]) -> pd.DataFrame:
    """Resumo por pipeline; entrada vazia gera DataFrame vazio com as mesmas colunas."""
    rows = [
        {
            "pipeline_id": r.pipeline_id,
            "timestamp": r.timestamp,
            "severity": r.severity.value,
            "status": r.status.value if r.status is not None else None,
        }
        for r in records
    ]
    if not rows:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    df = pd.DataFrame(rows)
    out: List[Dict[str, Any]] = []
    for pipeline_id, group in df.groupby("pipeline_id", sort=True):
        counts = group["status"].value_counts()
        row: Dict[str, Any] = {
            "pipeline_id": pipeline_id,
            "records": int(len(group)),
            "errors": int((group["severity"] == Severity.ERROR.value).sum()),
        }
        for status in ExecutionStatus:
            row[status.value] = int(counts.get(status.value, 0))
        row["first_timestamp"] = group["timestamp"].min()
        row["last_timestamp"] = group["timestamp"].max()
        out.append(row)

    return pd.DataFrame(out, columns=SUMMARY_COLUMNS)
