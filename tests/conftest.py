# tests/conftest.py
"""
Fixtures compartilhados para testes do Otto Flow.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações YAML mínimas e determinísticas (defaults + local)
- fábricas de nós e arestas no formato JSON do editor
- o grafo canônico válido trigger -> build -> deploy
- registros de log de dois pipelines, em ordem de chegada embaralhada
- um `ApiClient` ligado a um `httpx.MockTransport`

O objetivo destas fixtures é permitir testes do core e dos clients sem
depender de:
- rede
- variáveis de ambiente reais
- backend do Otto

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Dados retornados são determinísticos e isolados
    - Fábricas retornam dicts do editor; a conversão para tipos do core
      fica no teste, para exercitar `from_dict`

Invariantes:
    - Nenhuma fixture realiza I/O de rede
    - Todas as fixtures são seguras para execução em paralelo

Limites explícitos:
    - Não substituir testes de integração com o backend real
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest


# =====================================================
# Config
# =====================================================

@pytest.fixture
def config_defaults_yaml() -> str:
    """
    YAML de defaults semelhante ao empacotado com o Otto Flow.

    Usado pelos testes do loader e do deep-merge como base sobre a qual
    o arquivo local é aplicado.
    """
    return """
api:
  base_url: http://localhost:4000
  api_prefix: /api/v1
  timeout_seconds: 30

validation:
  required_keys: {}

logs:
  default_timeline: all-time
  preview_lines: 10
  error_context_lines: 3
""".lstrip()


@pytest.fixture
def config_local_yaml() -> str:
    """Override local: troca a URL do backend e exige `region` em nós deploy."""
    return """
api:
  base_url: https://otto.example.com

validation:
  required_keys:
    deploy: [region]
""".lstrip()


# =====================================================
# Grafo
# =====================================================

@pytest.fixture
def make_node() -> Callable[..., Dict[str, Any]]:
    def _make(node_id: str, kind: str, **data: Any) -> Dict[str, Any]:
        return {
            "id": node_id,
            "type": kind,
            "position": {"x": 0, "y": 0},
            "data": dict(data),
        }

    return _make


@pytest.fixture
def make_edge() -> Callable[..., Dict[str, Any]]:
    def _make(source: str, target: str, edge_id: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
        edge = {"id": edge_id or f"{source}->{target}", "source": source, "target": target}
        edge.update(extra)
        return edge

    return _make


@pytest.fixture
def valid_graph_dict(make_node, make_edge) -> Dict[str, Any]:
    """
    Grafo mínimo válido: A(trigger) -> B(build) -> C(deploy).

    Decisões:
        - O nó deploy carrega `environment`, sua única chave obrigatória
        - Viewport presente para exercitar o round-trip de apresentação
    """
    return {
        "nodes": [
            make_node("A", "trigger", label="Start"),
            make_node("B", "build", command="npm run build"),
            make_node("C", "deploy", environment="production"),
        ],
        "edges": [make_edge("A", "B"), make_edge("B", "C")],
        "viewport": {"x": 10, "y": 20, "zoom": 1.5},
    }


# =====================================================
# Logs
# =====================================================

T0 = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def base_time() -> datetime:
    return T0


@pytest.fixture
def raw_log_records() -> List[Dict[str, Any]]:
    """
    Registros de dois pipelines em ordem de chegada embaralhada.

    P1 possui 3 registros (t1 < t2 < t3); P2 possui 1. Timestamps chegam
    em formatos mistos (ISO com `Z` e epoch ms) e chaves mistas
    (snake_case e camelCase).
    """
    t1, t2, t3 = T0, T0 + timedelta(minutes=1), T0 + timedelta(minutes=2)
    return [
        {"id": "r3", "projectId": "proj_1", "pipelineId": "P1", "buildId": "b1",
         "timestamp": t3.isoformat().replace("+00:00", "Z"), "level": "ERROR",
         "status": "failed", "message": "Tests FAILED: 2 assertions"},
        {"record_id": "r4", "project_id": "proj_2", "pipeline_id": "P2", "build_id": "b2",
         "timestamp": int(T0.timestamp() * 1000), "severity": "INFO",
         "status": "success", "message": "deploy finished"},
        {"id": "r1", "projectId": "proj_1", "pipelineId": "P1", "buildId": "b1",
         "timestamp": t1.isoformat(), "level": "INFO",
         "status": "running", "message": "Entering phase INSTALL"},
        {"id": "r2", "projectId": "proj_1", "pipelineId": "P1", "buildId": "b1",
         "timestamp": int(t2.timestamp() * 1000), "level": "WARN",
         "status": "failed", "message": "npm WARN deprecated package"},
    ]


# =====================================================
# HTTP
# =====================================================

@pytest.fixture
def make_api():
    """
    Fábrica de `ApiClient` sobre `httpx.MockTransport`.

    Uso:
        api = make_api(handler)              # token padrão
        api = make_api(handler, token=None)  # sem credencial
    """
    from otto_flow.api.client import ApiClient

    created = []

    def _make(handler: Callable[[httpx.Request], httpx.Response], token: Optional[str] = "t0k3n") -> ApiClient:
        api = ApiClient(
            "http://otto.test",
            token=token,
            transport=httpx.MockTransport(handler),
        )
        created.append(api)
        return api

    yield _make

    for api in created:
        api.close()
