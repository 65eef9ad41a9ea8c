# src/otto_flow/core/identifiers/__init__.py
"""
Identificadores do Otto Flow.

Componentes:
    - normalizer → mapeamento bidirecional id curto <-> id canônico
    - routes     → caminhos canônicos de navegação e guard de formato UUID

Ambos os módulos são puros e nunca levantam exceção para dados
malformados: o normalizador devolve a entrada inalterada e as rotas
devolvem um `RouteMatch` com `not_found=True`.
"""

from .normalizer import (
    EntityKind,
    denormalize,
    is_canonical,
    normalize,
    normalize_pipeline_id,
    normalize_project_id,
)
from .routes import (
    UUID_PATTERN,
    RouteMatch,
    is_valid_route_id,
    new_pipeline_path,
    parse_pipeline_path,
    pipeline_path,
)

__all__ = [
    "EntityKind",
    "denormalize",
    "is_canonical",
    "normalize",
    "normalize_pipeline_id",
    "normalize_project_id",
    "UUID_PATTERN",
    "RouteMatch",
    "is_valid_route_id",
    "new_pipeline_path",
    "parse_pipeline_path",
    "pipeline_path",
]
