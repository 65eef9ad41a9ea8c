# src/otto_flow/core/graph/model.py
"""
Modelo em memória do grafo de pipeline (PipelineFlowData).

Este módulo define o container do grafo e suas consultas estruturais:
    - busca de nó por id
    - arestas de entrada/saída de um nó
    - lista de adjacência
    - nós de trigger
    - ordem de execução topológica determinística

O modelo é um container de dados puro: ele não valida o grafo. Consultas
toleram grafos malformados (ids duplicados resolvem para a primeira
ocorrência; arestas pendentes são ignoradas na adjacência), exceto
`execution_order`, que só deve ser chamada após validação aprovada.

Decisões arquiteturais:
    - Ordenação topológica determinística (Kahn modificado), empates
      resolvidos por ordem lexicográfica de `node.id`
    - A ordem de inserção de nós não tem significado para execução

Invariantes:
    - Nenhuma consulta muta o grafo
    - A mesma definição produz sempre a mesma adjacência e a mesma ordem

Limites explícitos:
    - Não executa estágios
    - Não decide se o grafo pode ser salvo ou executado (ver `validator`)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Set

from .types import Edge, Node, NodeKind, Viewport


class CycleDetectedError(ValueError):
    """
    Exceção levantada quando `execution_order` encontra um ciclo.

    O validador reporta ciclos como violação (valor); esta exceção só
    aparece quando um chamador pula a validação antes de pedir a ordem
    de execução.
    """


@dataclass(frozen=True)
class PipelineFlowData:
    """
    Grafo completo de um pipeline.

    Campos:
        - nodes: sequência de nós em ordem de inserção
        - edges: sequência de arestas
        - viewport: câmera do canvas (opcional, ignorada pelo core)
    """
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
    viewport: Optional[Viewport] = None

    # -----------------------------
    # Serialização
    # -----------------------------
    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "PipelineFlowData":
        viewport = raw.get("viewport")
        return cls(
            nodes=[Node.from_dict(n) for n in raw.get("nodes") or []],
            edges=[Edge.from_dict(e) for e in raw.get("edges") or []],
            viewport=Viewport.from_dict(viewport) if viewport else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }
        if self.viewport is not None:
            out["viewport"] = self.viewport.to_dict()
        return out

    # -----------------------------
    # Consultas estruturais
    # -----------------------------
    def node_ids(self) -> Set[str]:
        return {n.id for n in self.nodes}

    def node_by_id(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def edges_from(self, node_id: str) -> List[Edge]:
        return [e for e in self.edges if e.source == node_id]

    def edges_to(self, node_id: str) -> List[Edge]:
        return [e for e in self.edges if e.target == node_id]

    def edges_for(self, node_id: str) -> List[Edge]:
        return [e for e in self.edges if e.source == node_id or e.target == node_id]

    def trigger_nodes(self) -> List[Node]:
        return [n for n in self.nodes if n.kind == NodeKind.TRIGGER]

    def resolvable_edges(self) -> List[Edge]:
        """Arestas cujas duas pontas existem no conjunto de nós."""
        ids = self.node_ids()
        return [e for e in self.edges if e.source in ids and e.target in ids]

    def adjacency(self) -> Dict[str, List[str]]:
        """
        Lista de sucessores por nó, considerando apenas arestas resolvíveis.

        Cada lista é ordenada por (target, edge.id) e pode conter repetições
        quando existem arestas paralelas.
        """
        adj: Dict[str, List[str]] = {}
        for node in self.nodes:
            adj.setdefault(node.id, [])
        for edge in sorted(self.resolvable_edges(), key=lambda e: (e.target, e.id)):
            adj[edge.source].append(edge.target)
        return adj

    def execution_order(self) -> List[Node]:
        """
        Ordem topológica determinística dos nós.

        Raises:
            CycleDetectedError: Se o grafo contiver ciclo.
        """
        adj = self.adjacency()
        incoming: Dict[str, int] = {nid: 0 for nid in adj}
        for targets in adj.values():
            for target in targets:
                incoming[target] += 1

        ready: List[str] = sorted(nid for nid, c in incoming.items() if c == 0)
        order_ids: List[str] = []

        while ready:
            nid = ready.pop(0)  # menor lexicográfico
            order_ids.append(nid)
            for child in sorted(adj[nid]):
                incoming[child] -= 1
                if incoming[child] == 0:
                    ready.append(child)
                    ready.sort()

        if len(order_ids) != len(adj):
            raise CycleDetectedError("Cycle detected in pipeline graph")

        return [self.node_by_id(nid) for nid in order_ids]  # type: ignore[misc]
