# src/otto_flow/core/graph/configs.py
"""
Configuração tipada por kind de nó.

O payload `data` de um nó chega do editor como um mapa aberto. Este
módulo o representa como uma variante etiquetada: uma dataclass imutável
por `NodeKind`, cada uma com seus campos próprios. As chaves obrigatórias
de cada kind são exatamente os campos sem valor default, de modo que a
tabela de chaves obrigatórias usada pela validação é derivada dos tipos
e não mantida à parte.

Chaves obrigatórias (v1):
    - trigger, build, test → nenhuma (defaults: event="manual", command=None)
    - deploy        → environment
    - notification  → channel
    - approval      → approvers
    - custom-script → script
    - integration   → provider

Chaves adicionais podem ser exigidas por configuração
(`validation.required_keys`); chaves desconhecidas são preservadas em
`extra`.

Limites explícitos:
    - Não valida valores (apenas presença)
    - Não executa nada com a configuração
"""

from __future__ import annotations

from dataclasses import MISSING, dataclass, field, fields
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type, Union

from otto_flow.core.exceptions import InvariantViolation

from .types import Node, NodeKind


@dataclass(frozen=True)
class TriggerConfig:
    event: str = "manual"
    branch: Optional[str] = None
    schedule: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BuildConfig:
    command: Optional[str] = None
    working_directory: str = "."
    environment_variables: Dict[str, str] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TestConfig:
    __test__ = False  # não é classe de teste do pytest

    command: Optional[str] = None
    framework: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeployConfig:
    environment: str
    target: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NotificationConfig:
    channel: str
    recipients: List[str] = field(default_factory=list)
    on: List[str] = field(default_factory=lambda: ["failed"])
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ApprovalConfig:
    approvers: List[str]
    timeout_minutes: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CustomScriptConfig:
    script: str
    shell: str = "bash"
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class IntegrationConfig:
    provider: str
    settings: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)


NodeConfig = Union[
    TriggerConfig,
    BuildConfig,
    TestConfig,
    DeployConfig,
    NotificationConfig,
    ApprovalConfig,
    CustomScriptConfig,
    IntegrationConfig,
]

CONFIG_TYPES: Dict[NodeKind, Type[Any]] = {
    NodeKind.TRIGGER: TriggerConfig,
    NodeKind.BUILD: BuildConfig,
    NodeKind.TEST: TestConfig,
    NodeKind.DEPLOY: DeployConfig,
    NodeKind.NOTIFICATION: NotificationConfig,
    NodeKind.APPROVAL: ApprovalConfig,
    NodeKind.CUSTOM_SCRIPT: CustomScriptConfig,
    NodeKind.INTEGRATION: IntegrationConfig,
}

# chaves do payload do editor que nunca são configuração do estágio
_PRESENTATION_KEYS = frozenset({"label", "icon", "description", "colorClass", "colorHex"})

RequiredKeysOverride = Mapping[Union[NodeKind, str], Iterable[str]]


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def required_keys(kind: NodeKind, extra_required: Optional[RequiredKeysOverride] = None) -> Tuple[str, ...]:
    """
    Chaves obrigatórias de um kind: campos sem default + extras configurados.

    Kinds desconhecidos em `extra_required` são ignorados; o loader de
    configuração é quem os rejeita.
    """
    cfg_type = CONFIG_TYPES[kind]
    keys = [
        f.name
        for f in fields(cfg_type)
        if f.default is MISSING and f.default_factory is MISSING  # type: ignore[misc]
    ]
    if extra_required:
        for k, extra in extra_required.items():
            try:
                configured = NodeKind.parse(k)
            except ValueError:
                continue
            if configured == kind:
                keys.extend(x for x in extra if x not in keys)
    return tuple(keys)


def missing_config_keys(node: Node, extra_required: Optional[RequiredKeysOverride] = None) -> List[str]:
    """Chaves obrigatórias ausentes (ou vazias) no payload `data` do nó, em ordem alfabética."""
    data = node.data or {}
    return sorted(k for k in required_keys(node.kind, extra_required) if _is_blank(data.get(k)))


def parse_node_config(node: Node) -> NodeConfig:
    """
    Converte o payload aberto do nó em sua configuração tipada.

    Deve ser chamada após a validação do grafo: uma chave obrigatória
    ausente neste ponto indica violação de invariante em outra camada.

    Raises:
        InvariantViolation: Se chaves obrigatórias estiverem ausentes.
    """
    missing = missing_config_keys(node)
    if missing:
        raise InvariantViolation(
            message="Configuração obrigatória ausente em nó já validado",
            details={"node_id": node.id, "kind": node.kind.value, "missing_keys": missing},
        )

    cfg_type = CONFIG_TYPES[node.kind]
    known = {f.name for f in fields(cfg_type)} - {"extra"}
    kwargs: Dict[str, Any] = {}
    extra: Dict[str, Any] = {}
    for key, value in (node.data or {}).items():
        if key in known:
            kwargs[key] = value
        elif key not in _PRESENTATION_KEYS:
            extra[key] = value
    return cfg_type(**kwargs, extra=extra)
