# src/otto_flow/api/builds.py
"""
Client da API de disparo e status de builds.

Rotas (relativas ao prefixo da API):
    - POST /codebuild/{project_id}/start-flow → dispara um build do grafo
    - GET  /codebuild/status/{build_id}       → status global + por estágio

O grafo enviado passa antes por `assert_can_run`: qualquer violação
(inclusive avisos) impede o disparo. O status remoto é traduzido para
`ExecutionStatus` via `status_from_remote`.

Formato de status aceito:
    {"buildId": "...", "buildStatus" | "status": "IN_PROGRESS",
     "steps": {"<step_id>": "<status>", ...}}
ou, no lugar de `steps`, a lista de fases do serviço de build:
    "phases": [{"name" | "phaseType": "BUILD", "status" | "phaseStatus": "SUCCEEDED"}]
Uma fase sem status é a fase corrente (running).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from otto_flow.core.errors import remote_failure
from otto_flow.core.exceptions import RemoteFailure
from otto_flow.core.graph import PipelineFlowData, assert_can_run
from otto_flow.core.graph.configs import RequiredKeysOverride
from otto_flow.core.identifiers import normalize_pipeline_id, normalize_project_id
from otto_flow.core.lifecycle import BuildSnapshot, ExecutionStatus, status_from_remote

from .client import ApiClient

logger = logging.getLogger(__name__)


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


class BuildClient:
    def __init__(self, api: ApiClient, *, required_keys: Optional[RequiredKeysOverride] = None):
        self.api = api
        self.required_keys = required_keys

    def _fail(self, path: str, reason: str) -> RemoteFailure:
        return RemoteFailure.from_payload(remote_failure(endpoint=self.api.endpoint(path), reason=reason))

    def run(self, project_id: str, graph: PipelineFlowData, *, pipeline_id: Optional[str] = None) -> str:
        """
        Dispara um build para o grafo validado.

        Returns:
            str: Id do build atribuído pelo serviço.

        Raises:
            GraphValidationError: Grafo com qualquer violação (nenhuma
                requisição é feita).
            RemoteFailure: Falha remota ou resposta sem build id.
        """
        assert_can_run(graph, required_keys=self.required_keys)
        canonical = normalize_project_id(project_id)
        path = f"codebuild/{canonical}/start-flow"
        payload: Dict[str, Any] = {"flowData": graph.to_dict()}
        if pipeline_id is not None:
            payload["pipelineId"] = normalize_pipeline_id(pipeline_id)

        body = self.api.request("POST", path, json=payload)
        if isinstance(body, Mapping) and isinstance(body.get("data"), Mapping) and "buildId" not in body:
            body = body["data"]
        build_id = _first(body, "buildId", "build_id", "id") if isinstance(body, Mapping) else None
        if not build_id:
            raise self._fail(path, "missing_build_id")
        logger.info("Build %s started for project %s", build_id, canonical)
        return str(build_id)

    def status(self, build_id: str) -> BuildSnapshot:
        """
        Consulta o status corrente de um build.

        Raises:
            NotFound: Build inexistente.
            RemoteFailure: Falha remota ou status desconhecido.
        """
        path = f"codebuild/status/{build_id}"
        body = self.api.request("GET", path)
        if isinstance(body, Mapping) and isinstance(body.get("data"), Mapping) and "buildStatus" not in body:
            body = body["data"]
        if not isinstance(body, Mapping):
            raise self._fail(path, "unexpected_payload")

        raw_status = _first(body, "buildStatus", "build_status", "status")
        status = status_from_remote(raw_status)
        if status is None:
            raise self._fail(path, f"unknown_status: {raw_status!r}")

        steps: Dict[str, ExecutionStatus] = {}
        if isinstance(body.get("steps"), Mapping):
            items = list(body["steps"].items())
        else:
            items = [
                (_first(p, "name", "phaseType", "phase_type"), _first(p, "status", "phaseStatus", "phase_status"))
                for p in body.get("phases") or []
                if isinstance(p, Mapping)
            ]
        for step_id, raw in items:
            if step_id is None:
                continue
            step_status = status_from_remote(raw) if raw is not None else ExecutionStatus.RUNNING
            if step_status is None:
                raise self._fail(path, f"unknown_step_status: {step_id}={raw!r}")
            steps[str(step_id)] = step_status

        return BuildSnapshot(
            build_id=str(_first(body, "buildId", "build_id", "id") or build_id),
            status=status,
            steps=steps,
        )
