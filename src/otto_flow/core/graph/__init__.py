# src/otto_flow/core/graph/__init__.py
"""
Grafo de pipeline do Otto Flow.

Componentes:
    - types     → NodeKind, Position, Viewport, Node, Edge
    - model     → PipelineFlowData e consultas estruturais
    - configs   → configuração tipada por kind de nó
    - validator → regras de boa formação (save/run)
"""

from .configs import (
    CONFIG_TYPES,
    ApprovalConfig,
    BuildConfig,
    CustomScriptConfig,
    DeployConfig,
    IntegrationConfig,
    NodeConfig,
    NotificationConfig,
    TestConfig,
    TriggerConfig,
    missing_config_keys,
    parse_node_config,
    required_keys,
)
from .model import CycleDetectedError, PipelineFlowData
from .types import Edge, Node, NodeKind, Position, Viewport
from .validator import (
    Severity,
    ValidationResult,
    Violation,
    ViolationCode,
    assert_can_run,
    assert_can_save,
    validate,
)

__all__ = [
    "CONFIG_TYPES",
    "ApprovalConfig",
    "BuildConfig",
    "CustomScriptConfig",
    "DeployConfig",
    "IntegrationConfig",
    "NodeConfig",
    "NotificationConfig",
    "TestConfig",
    "TriggerConfig",
    "missing_config_keys",
    "parse_node_config",
    "required_keys",
    "CycleDetectedError",
    "PipelineFlowData",
    "Edge",
    "Node",
    "NodeKind",
    "Position",
    "Viewport",
    "Severity",
    "ValidationResult",
    "Violation",
    "ViolationCode",
    "assert_can_run",
    "assert_can_save",
    "validate",
]
