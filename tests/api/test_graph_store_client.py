# tests/api/test_graph_store_client.py
"""
Testes do client de definição de grafo (GraphStoreClient).

Os testes asseguram que:
- ids curtos são normalizados antes de montar a rota
- o envelope `{"data": ...}` é aceito na leitura
- payload malformado é `RemoteFailure`, nunca grafo parcial
- grafo com erro de validação não sai do processo
- avisos (nó órfão) não bloqueiam o save
"""

import json

import httpx
import pytest

from otto_flow.api import GraphStoreClient
from otto_flow.core.exceptions import GraphValidationError, NotFound, RemoteFailure
from otto_flow.core.graph import NodeKind, PipelineFlowData


def _recording(response_factory):
    calls = []

    def handler(request):
        calls.append(request)
        return response_factory(request)

    return calls, handler


def test_get_definition_normalizes_id(make_api, valid_graph_dict):
    calls, handler = _recording(lambda r: httpx.Response(200, json=valid_graph_dict))
    client = GraphStoreClient(make_api(handler))

    graph = client.get_definition("12")

    assert calls[0].method == "GET"
    assert calls[0].url.path == "/api/v1/pipelines/pipe_12"
    assert [n.id for n in graph.nodes] == ["A", "B", "C"]
    assert graph.nodes[2].kind is NodeKind.DEPLOY
    assert graph.viewport.zoom == 1.5


def test_get_definition_accepts_data_envelope(make_api, valid_graph_dict):
    client = GraphStoreClient(make_api(lambda r: httpx.Response(200, json={"data": valid_graph_dict})))

    assert client.get_definition("pipe_1") == PipelineFlowData.from_dict(valid_graph_dict)


@pytest.mark.parametrize(
    "body,reason_prefix",
    [
        ({"nodes": [{"id": "A", "type": "rocket"}], "edges": []}, "malformed_graph"),
        ({"nodes": [{"type": "build"}], "edges": []}, "malformed_graph"),
        ({"nodes": ["A"], "edges": []}, "malformed_graph"),
        ([1, 2, 3], "unexpected_payload"),
    ],
)
def test_get_definition_rejects_malformed_payload(make_api, body, reason_prefix):
    client = GraphStoreClient(make_api(lambda r: httpx.Response(200, json=body)))

    with pytest.raises(RemoteFailure) as exc:
        client.get_definition("pipe_1")

    assert exc.value.details["reason"].startswith(reason_prefix)


def test_get_definition_not_found(make_api):
    client = GraphStoreClient(make_api(lambda r: httpx.Response(404)))

    with pytest.raises(NotFound):
        client.get_definition("pipe_9")


def test_put_definition_sends_graph_and_returns_echo(make_api, valid_graph_dict):
    graph = PipelineFlowData.from_dict(valid_graph_dict)
    calls, handler = _recording(lambda r: httpx.Response(200, json=json.loads(r.content)))
    client = GraphStoreClient(make_api(handler))

    saved = client.put_definition("3", graph)

    assert calls[0].method == "PUT"
    assert calls[0].url.path == "/api/v1/pipelines/pipe_3"
    assert json.loads(calls[0].content) == graph.to_dict()
    assert saved == graph


def test_put_definition_without_graph_in_response(make_api, valid_graph_dict):
    client = GraphStoreClient(make_api(lambda r: httpx.Response(200, json={"ok": True})))

    assert client.put_definition("pipe_1", PipelineFlowData.from_dict(valid_graph_dict)) is None


def test_put_definition_blocks_invalid_graph_locally(make_api, make_node, make_edge):
    calls, handler = _recording(lambda r: httpx.Response(200))
    client = GraphStoreClient(make_api(handler))
    cyclic = PipelineFlowData.from_dict({
        "nodes": [make_node("A", "trigger"), make_node("B", "build"), make_node("C", "build")],
        "edges": [make_edge("A", "B"), make_edge("B", "C"), make_edge("C", "B")],
    })

    with pytest.raises(GraphValidationError) as exc:
        client.put_definition("pipe_1", cyclic)

    assert calls == []
    assert exc.value.details["action"] == "save"
    assert "CYCLE" in [v["code"] for v in exc.value.violations]


def test_put_definition_allows_warnings(make_api, make_node):
    calls, handler = _recording(lambda r: httpx.Response(204))
    client = GraphStoreClient(make_api(handler))
    with_orphan = PipelineFlowData.from_dict({
        "nodes": [make_node("A", "trigger"), make_node("B", "build")],
        "edges": [],
    })

    assert client.put_definition("pipe_1", with_orphan) is None
    assert len(calls) == 1


def test_put_definition_honours_required_keys(make_api, valid_graph_dict):
    client = GraphStoreClient(make_api(lambda r: httpx.Response(200)), required_keys={"deploy": ["region"]})

    with pytest.raises(GraphValidationError):
        client.put_definition("pipe_1", PipelineFlowData.from_dict(valid_graph_dict))
