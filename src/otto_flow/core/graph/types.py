# src/otto_flow/core/graph/types.py
"""
Tipos canônicos do grafo de pipeline do Otto Flow.

Este módulo define os enums e estruturas imutáveis que representam a
definição visual de um pipeline CI/CD:

    - NodeKind         → classificação fixa de estágios
    - Position         → coordenadas (x, y) do canvas
    - Viewport         → câmera do canvas
    - Node             → um estágio do pipeline
    - Edge             → conexão dirigida entre dois nós
    - PipelineFlowData → o grafo completo (ver `model`)

Princípios fundamentais:
    - Tipos são estáveis e serializáveis no formato JSON do editor
    - Posição, viewport e flags de interação pertencem à camada de
      renderização; o core os transporta sem interpretá-los
    - Nenhuma regra de validação vive neste módulo

Formato de fio:
    - Nós usam `type` para o kind (formato do editor); `kind` também é aceito
    - Arestas usam camelCase (`sourceHandle`, `targetHandle`)

Limites explícitos:
    - Não valida o grafo (ver `validator`)
    - Não interpreta o payload `data` (ver `configs`)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class NodeKind(str, Enum):
    """
    Kinds de estágio suportados por um pipeline.

    Os valores são strings para facilitar:
        - serialização em JSON
        - leitura direta do payload do editor

    Invariantes:
        - Todo nó possui exatamente um `kind`
        - O valor textual do enum é estável e canônico
    """
    TRIGGER = "trigger"
    BUILD = "build"
    TEST = "test"
    DEPLOY = "deploy"
    NOTIFICATION = "notification"
    APPROVAL = "approval"
    CUSTOM_SCRIPT = "custom-script"
    INTEGRATION = "integration"

    @classmethod
    def parse(cls, value: Any) -> "NodeKind":
        if isinstance(value, NodeKind):
            return value
        if isinstance(value, str):
            # o editor às vezes grava com underscore (custom_script)
            normalized = value.strip().lower().replace("_", "-")
            for kind in cls:
                if kind.value == normalized:
                    return kind
        raise ValueError(f"Unknown node kind: {value!r}")


@dataclass(frozen=True)
class Position:
    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Viewport:
    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "zoom": self.zoom}

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Viewport":
        return cls(
            x=float(raw.get("x", 0.0)),
            y=float(raw.get("y", 0.0)),
            zoom=float(raw.get("zoom", 1.0)),
        )


@dataclass(frozen=True)
class Node:
    """
    Um estágio do pipeline.

    Campos:
        - id: identificador único dentro do grafo
        - kind: tipo de estágio (NodeKind)
        - position: coordenadas do canvas (opaco para o core)
        - data: payload de configuração específico do kind (mapa aberto)
        - draggable/selectable/deletable: dicas de apresentação

    Invariantes:
        - Uma instância nunca é alterada após criada
        - `data` é tratado como somente leitura pelo core
    """
    id: str
    kind: NodeKind
    position: Position = field(default_factory=Position)
    data: Dict[str, Any] = field(default_factory=dict)
    draggable: bool = True
    selectable: bool = True
    deletable: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind.value,
            "position": self.position.to_dict(),
            "data": dict(self.data),
            "draggable": self.draggable,
            "selectable": self.selectable,
            "deletable": self.deletable,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Node":
        """
        Constrói um nó a partir do formato JSON do editor.

        Raises:
            ValueError: Se `id` estiver ausente ou o kind for desconhecido.
        """
        node_id = raw.get("id")
        if not isinstance(node_id, str) or not node_id.strip():
            raise ValueError("node.id must be a non-empty string")
        pos = raw.get("position") or {}
        return cls(
            id=node_id,
            kind=NodeKind.parse(raw.get("kind", raw.get("type"))),
            position=Position(x=float(pos.get("x", 0.0)), y=float(pos.get("y", 0.0))),
            data=dict(raw.get("data") or {}),
            draggable=bool(raw.get("draggable", True)),
            selectable=bool(raw.get("selectable", True)),
            deletable=bool(raw.get("deletable", True)),
        )


@dataclass(frozen=True)
class Edge:
    """
    Conexão dirigida `source -> target`.

    `source_handle`/`target_handle` identificam sub-portas quando um nó
    expõe múltiplos pontos de conexão (ex.: ramo true/false de uma
    condição). `label` e `animated` são apenas apresentação.
    """
    id: str
    source: str
    target: str
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None
    label: Optional[str] = None
    animated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "animated": self.animated,
        }
        if self.source_handle is not None:
            out["sourceHandle"] = self.source_handle
        if self.target_handle is not None:
            out["targetHandle"] = self.target_handle
        if self.label is not None:
            out["label"] = self.label
        return out

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Edge":
        edge_id = raw.get("id")
        if not isinstance(edge_id, str) or not edge_id.strip():
            raise ValueError("edge.id must be a non-empty string")
        return cls(
            id=edge_id,
            source=str(raw.get("source", "")),
            target=str(raw.get("target", "")),
            source_handle=raw.get("sourceHandle", raw.get("source_handle")),
            target_handle=raw.get("targetHandle", raw.get("target_handle")),
            label=raw.get("label"),
            animated=bool(raw.get("animated", False)),
        )
