# src/otto_flow/core/identifiers/routes.py
"""
Superfície de rotas produzida para a camada de UI.

Caminhos canônicos:
    - /projects/{project_id}/pipelines/{pipeline_id}
    - /projects/{project_id}/pipelines/new

Segmentos `{id}` são validados contra o padrão UUID estrito (grupos hex
8-4-4-4-12, sem distinção de maiúsculas). Segmentos fora do padrão são
sinalizados como `not_found` para que o guard de rotas reescreva a
requisição para a página de não encontrado antes de chegar ao core.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)

_PROJECT_PATH = re.compile(r"^/projects/([^/]+)(/.*)?$")
_PIPELINE_SUBPATH = re.compile(r"^/pipelines/([^/]+)(/.*)?$")

NEW_SEGMENT = "new"


@dataclass(frozen=True)
class RouteMatch:
    """Resultado do parse de um caminho de projeto/pipeline."""

    project_id: str
    pipeline_id: Optional[str] = None
    is_new: bool = False
    not_found: bool = False


def is_valid_route_id(segment: str) -> bool:
    return isinstance(segment, str) and bool(UUID_PATTERN.fullmatch(segment))


def pipeline_path(project_id: str, pipeline_id: str) -> str:
    return f"/projects/{project_id}/pipelines/{pipeline_id}"


def new_pipeline_path(project_id: str) -> str:
    return f"/projects/{project_id}/pipelines/{NEW_SEGMENT}"


def parse_pipeline_path(path: str) -> Optional[RouteMatch]:
    """
    Interpreta um caminho sob `/projects/...`.

    Retorna None quando o caminho não pertence à árvore de projetos
    (o guard deixa a requisição seguir). Caso contrário retorna um
    `RouteMatch`; ids fora do padrão UUID produzem `not_found=True`.
    O segmento `new` é aceito como pipeline em criação.
    """
    match = _PROJECT_PATH.match(path or "")
    if not match:
        return None

    project_id, sub_path = match.group(1), match.group(2)
    if not is_valid_route_id(project_id):
        return RouteMatch(project_id=project_id, not_found=True)

    if not sub_path:
        return RouteMatch(project_id=project_id)

    pipe_match = _PIPELINE_SUBPATH.match(sub_path)
    if not pipe_match:
        return RouteMatch(project_id=project_id)

    pipeline_id = pipe_match.group(1)
    if pipeline_id == NEW_SEGMENT:
        return RouteMatch(project_id=project_id, is_new=True)
    if not is_valid_route_id(pipeline_id):
        return RouteMatch(project_id=project_id, pipeline_id=pipeline_id, not_found=True)
    return RouteMatch(project_id=project_id, pipeline_id=pipeline_id)
