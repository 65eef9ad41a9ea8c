# src/otto_flow/core/graph/validator.py
"""
Validador estrutural do grafo de pipeline.

Este módulo implementa a função pura `validate(graph)`, que confere um
`PipelineFlowData` contra as regras de boa formação antes que ele possa
ser salvo ou executado.

Regras (cada violação carrega código + id do elemento ofensor):
    1. DANGLING_EDGE     → aresta referencia nó inexistente
    2. DUPLICATE_ID      → dois nós ou duas arestas com o mesmo id
    3. ORPHAN_NODE       → nó não-trigger sem aresta de entrada (aviso)
    4. CYCLE             → o grafo dirigido contém ciclo
    5. MULTIPLE_TRIGGERS → mais de um nó trigger
    6. MISSING_CONFIG    → payload `data` sem chave obrigatória do kind

Política de severidade:
    - A regra 3 é aviso: não bloqueia save, bloqueia run
    - As demais são erros: bloqueiam save e run

Decisões arquiteturais:
    - Violações são coletadas exaustivamente (sem curto-circuito)
    - Ordem estável: número da regra, depois id do elemento ascendente
    - Detecção de ciclo por DFS iterativa com pilha explícita e marcação
      em três cores (não visitado / em progresso / concluído); cada
      back-edge gera uma violação referenciando a aresta
    - Arestas pendentes são excluídas da DFS, para que não produzam
      violações de outro tipo; uma aresta cujo alvo existe ainda conta
      como entrada do alvo na regra 3
    - O primeiro trigger em ordem de inserção é o ponto de entrada; os
      demais recebem a violação da regra 5

Invariantes:
    - Validar duas vezes o mesmo grafo produz exatamente a mesma lista
    - Nenhuma exceção é levantada para grafos malformados

Limites explícitos:
    - Não executa o pipeline
    - Não corrige o grafo automaticamente
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

from otto_flow.core.errors import graph_validation_failed
from otto_flow.core.exceptions import GraphValidationError

from .configs import RequiredKeysOverride, missing_config_keys
from .model import PipelineFlowData
from .types import NodeKind


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class ViolationCode(str, Enum):
    DANGLING_EDGE = "DANGLING_EDGE"
    DUPLICATE_ID = "DUPLICATE_ID"
    ORPHAN_NODE = "ORPHAN_NODE"
    CYCLE = "CYCLE"
    MULTIPLE_TRIGGERS = "MULTIPLE_TRIGGERS"
    MISSING_CONFIG = "MISSING_CONFIG"

    @property
    def rule(self) -> int:
        return _RULE_NUMBERS[self]

    @property
    def severity(self) -> Severity:
        return Severity.WARNING if self is ViolationCode.ORPHAN_NODE else Severity.ERROR


_RULE_NUMBERS = {
    ViolationCode.DANGLING_EDGE: 1,
    ViolationCode.DUPLICATE_ID: 2,
    ViolationCode.ORPHAN_NODE: 3,
    ViolationCode.CYCLE: 4,
    ViolationCode.MULTIPLE_TRIGGERS: 5,
    ViolationCode.MISSING_CONFIG: 6,
}


@dataclass(frozen=True)
class Violation:
    """Uma constatação estruturada da validação."""

    code: ViolationCode
    element_id: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def rule(self) -> int:
        return self.code.rule

    @property
    def severity(self) -> Severity:
        return self.code.severity

    @property
    def blocking(self) -> bool:
        return self.severity is Severity.ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule": self.rule,
            "code": self.code.value,
            "element_id": self.element_id,
            "severity": self.severity.value,
            "message": self.message,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class ValidationResult:
    """
    Resultado da validação: `Valid` quando não há violações, `Invalid`
    caso contrário. `can_save`/`can_run` aplicam a política de severidade.
    """

    violations: Tuple[Violation, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.violations

    @property
    def errors(self) -> List[Violation]:
        return [v for v in self.violations if v.blocking]

    @property
    def warnings(self) -> List[Violation]:
        return [v for v in self.violations if not v.blocking]

    @property
    def can_save(self) -> bool:
        return not self.errors

    @property
    def can_run(self) -> bool:
        return self.valid

    def by_code(self, code: ViolationCode) -> List[Violation]:
        return [v for v in self.violations if v.code is code]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "valid" if self.valid else "invalid",
            "can_save": self.can_save,
            "can_run": self.can_run,
            "violations": [v.to_dict() for v in self.violations],
        }


# -----------------------------
# Regras
# -----------------------------

def _dangling_edges(graph: PipelineFlowData, node_ids: Set[str]) -> List[Violation]:
    out: List[Violation] = []
    for edge in graph.edges:
        missing = [end for end in (edge.source, edge.target) if end not in node_ids]
        if missing:
            out.append(Violation(
                code=ViolationCode.DANGLING_EDGE,
                element_id=edge.id,
                message=f"Edge '{edge.id}' references unknown node(s): {', '.join(missing)}",
                details={"source": edge.source, "target": edge.target, "missing": missing},
            ))
    return out


def _duplicate_ids(graph: PipelineFlowData) -> List[Violation]:
    out: List[Violation] = []
    for namespace, ids in (("node", [n.id for n in graph.nodes]), ("edge", [e.id for e in graph.edges])):
        counts = Counter(ids)
        for element_id, count in counts.items():
            if count > 1:
                out.append(Violation(
                    code=ViolationCode.DUPLICATE_ID,
                    element_id=element_id,
                    message=f"Duplicate {namespace} id '{element_id}' ({count} occurrences)",
                    details={"namespace": namespace, "occurrences": count},
                ))
    return out


def _orphan_nodes(graph: PipelineFlowData) -> List[Violation]:
    with_incoming = {e.target for e in graph.edges}
    out: List[Violation] = []
    seen: Set[str] = set()
    for node in graph.nodes:
        if node.id in seen:
            continue
        seen.add(node.id)
        if node.kind is NodeKind.TRIGGER or node.id in with_incoming:
            continue
        out.append(Violation(
            code=ViolationCode.ORPHAN_NODE,
            element_id=node.id,
            message=f"Node '{node.id}' ({node.kind.value}) has no incoming edge and is unreachable",
            details={"kind": node.kind.value},
        ))
    return out


_WHITE, _GRAY, _BLACK = 0, 1, 2


def _cycle_edges(graph: PipelineFlowData) -> List[Violation]:
    """DFS iterativa em três cores; cada back-edge vira uma violação."""
    succ: Dict[str, List[Tuple[str, str]]] = {n.id: [] for n in graph.nodes}
    for edge in sorted(graph.resolvable_edges(), key=lambda e: (e.target, e.id)):
        succ[edge.source].append((edge.target, edge.id))

    color: Dict[str, int] = {nid: _WHITE for nid in succ}
    back_edges: Dict[str, Tuple[str, str]] = {}

    for root in sorted(succ):
        if color[root] != _WHITE:
            continue
        color[root] = _GRAY
        stack: List[Tuple[str, int]] = [(root, 0)]
        while stack:
            nid, idx = stack[-1]
            children = succ[nid]
            if idx >= len(children):
                color[nid] = _BLACK
                stack.pop()
                continue
            stack[-1] = (nid, idx + 1)
            target, edge_id = children[idx]
            if color[target] == _GRAY:
                back_edges.setdefault(edge_id, (nid, target))
            elif color[target] == _WHITE:
                color[target] = _GRAY
                stack.append((target, 0))

    return [
        Violation(
            code=ViolationCode.CYCLE,
            element_id=edge_id,
            message=f"Edge '{edge_id}' ({source} -> {target}) closes a cycle",
            details={"source": source, "target": target},
        )
        for edge_id, (source, target) in back_edges.items()
    ]


def _multiple_triggers(graph: PipelineFlowData) -> List[Violation]:
    triggers = graph.trigger_nodes()
    if len(triggers) <= 1:
        return []
    entry = triggers[0]
    return [
        Violation(
            code=ViolationCode.MULTIPLE_TRIGGERS,
            element_id=node.id,
            message=f"Trigger '{node.id}' conflicts with entry trigger '{entry.id}'",
            details={"entry_trigger": entry.id, "trigger_count": len(triggers)},
        )
        for node in triggers[1:]
    ]


def _missing_config(graph: PipelineFlowData, required: Optional[RequiredKeysOverride]) -> List[Violation]:
    out: List[Violation] = []
    for node in graph.nodes:
        missing = missing_config_keys(node, required)
        if missing:
            out.append(Violation(
                code=ViolationCode.MISSING_CONFIG,
                element_id=node.id,
                message=f"Node '{node.id}' ({node.kind.value}) is missing required config: {', '.join(missing)}",
                details={"kind": node.kind.value, "missing_keys": missing},
            ))
    return out


def validate(
    graph: PipelineFlowData,
    *,
    required_keys: Optional[RequiredKeysOverride] = None,
) -> ValidationResult:
    """
    Valida um grafo contra todas as regras de boa formação.

    Args:
        graph (PipelineFlowData): Grafo a validar.
        required_keys: Chaves obrigatórias adicionais por kind
            (tipicamente `config["validation"]["required_keys"]`).

    Returns:
        ValidationResult: Violações em ordem (regra, id do elemento).
    """
    node_ids = graph.node_ids()
    violations: List[Violation] = []
    violations.extend(_dangling_edges(graph, node_ids))
    violations.extend(_duplicate_ids(graph))
    violations.extend(_orphan_nodes(graph))
    violations.extend(_cycle_edges(graph))
    violations.extend(_multiple_triggers(graph))
    violations.extend(_missing_config(graph, required_keys))

    # sort estável: empates preservam a ordem de coleta
    violations.sort(key=lambda v: (v.rule, v.element_id))
    return ValidationResult(violations=tuple(violations))


def _raise_if_blocked(result: ValidationResult, action: str, blocking: List[Any]) -> ValidationResult:
    if blocking:
        payload = graph_validation_failed(
            violations=[v.to_dict() for v in blocking],
            action=action,
        )
        raise GraphValidationError(
            message=payload.message,
            details=payload.details,
            hint=payload.hint,
        )
    return result


def assert_can_save(graph: PipelineFlowData, **kwargs: Any) -> ValidationResult:
    """Valida e levanta `GraphValidationError` se houver violação bloqueante."""
    result = validate(graph, **kwargs)
    return _raise_if_blocked(result, "save", result.errors)


def assert_can_run(graph: PipelineFlowData, **kwargs: Any) -> ValidationResult:
    """Valida e levanta `GraphValidationError` se houver qualquer violação."""
    result = validate(graph, **kwargs)
    return _raise_if_blocked(result, "run", list(result.violations))
