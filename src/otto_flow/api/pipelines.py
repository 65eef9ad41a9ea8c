# src/otto_flow/api/pipelines.py
"""
Client da API de persistência de grafos.

Rotas (relativas ao prefixo da API):
    - GET /pipelines/{pipeline_id} → PipelineFlowData JSON
    - PUT /pipelines/{pipeline_id} → grava PipelineFlowData JSON

Ids curtos são normalizados para a forma canônica antes do uso. O grafo
gravado passa antes por `assert_can_save`: violações bloqueantes
impedem a requisição.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from otto_flow.core.errors import remote_failure
from otto_flow.core.exceptions import RemoteFailure
from otto_flow.core.graph import PipelineFlowData, assert_can_save
from otto_flow.core.graph.configs import RequiredKeysOverride
from otto_flow.core.identifiers import normalize_pipeline_id

from .client import ApiClient

logger = logging.getLogger(__name__)


def _unwrap_graph(body: Any, endpoint: str) -> Mapping[str, Any]:
    # alguns backends envelopam o grafo em {"data": {...}}
    if isinstance(body, Mapping) and "nodes" not in body and isinstance(body.get("data"), Mapping):
        body = body["data"]
    if not isinstance(body, Mapping):
        raise RemoteFailure.from_payload(remote_failure(endpoint=endpoint, reason="unexpected_payload"))
    return body


class GraphStoreClient:
    def __init__(self, api: ApiClient, *, required_keys: Optional[RequiredKeysOverride] = None):
        self.api = api
        self.required_keys = required_keys

    def get_definition(self, pipeline_id: str) -> PipelineFlowData:
        """
        Busca a definição do grafo de um pipeline.

        Raises:
            NotFound: Pipeline inexistente.
            RemoteFailure: Falha remota ou payload malformado.
        """
        canonical = normalize_pipeline_id(pipeline_id)
        path = f"pipelines/{canonical}"
        body = _unwrap_graph(self.api.request("GET", path), self.api.endpoint(path))
        try:
            return PipelineFlowData.from_dict(body)
        except (TypeError, ValueError, AttributeError) as e:
            logger.error("Malformed graph for pipeline %s: %s", canonical, e)
            raise RemoteFailure.from_payload(
                remote_failure(endpoint=self.api.endpoint(path), reason=f"malformed_graph: {e}")
            ) from e

    def put_definition(self, pipeline_id: str, graph: PipelineFlowData) -> Optional[PipelineFlowData]:
        """
        Grava a definição do grafo após validação para save.

        Returns:
            Optional[PipelineFlowData]: O grafo devolvido pelo backend,
            quando a resposta traz um.

        Raises:
            GraphValidationError: Grafo com violação bloqueante (nenhuma
                requisição é feita).
        """
        assert_can_save(graph, required_keys=self.required_keys)
        canonical = normalize_pipeline_id(pipeline_id)
        path = f"pipelines/{canonical}"
        logger.info("Saving graph for pipeline %s (%d nodes, %d edges)", canonical, len(graph.nodes), len(graph.edges))
        body = self.api.request("PUT", path, json=graph.to_dict())
        if isinstance(body, Mapping):
            inner = body if "nodes" in body else body.get("data")
            if isinstance(inner, Mapping) and "nodes" in inner:
                return PipelineFlowData.from_dict(inner)
        return None
