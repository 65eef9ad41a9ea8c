# src/otto_flow/core/entities.py
"""
Entidades persistidas do Otto Flow: Project, Pipeline e PipelineStep.

Este módulo define os modelos de intercâmbio (JSON estruturado) das
entidades gravadas pelo backend. Os nomes de campo no fio são snake_case;
aliases camelCase são expostos para a camada de UI como renomeação pura,
sem transformação semântica.

Componentes principais:
    - PipelineStep       → estágio persistido (ordem + status)
    - Pipeline           → pipeline persistido com seus estágios
    - Project            → projeto com vínculo de repositório e de build
    - RepositoryBinding  → visão do vínculo com o repositório externo
    - BuildSystemBinding → visão do vínculo com o serviço de build
    - normalize_step_order → ordem estável e contígua dos estágios

Decisões arquiteturais:
    - Modelos pydantic com `populate_by_name`: entrada aceita snake_case
      ou camelCase; `model_dump(by_alias=True)` produz camelCase
    - Status aceitam o vocabulário remoto (`SUCCEEDED`, `IN_PROGRESS`, ...)
    - `order_index` repetido é reportado por `order_conflicts()` antes da
      normalização, nunca corrigido silenciosamente na leitura

Invariantes:
    - Após `with_normalized_steps()`, `order_index` é 0..n-1 sem lacunas
    - `derived_status()` segue as regras de `lifecycle.derive_pipeline_status`
    - Com estágios presentes, `Pipeline.status` é sempre o status derivado;
      o valor do fio só vale para pipelines sem estágios

Limites explícitos:
    - Não persiste nem busca entidades
    - Não aplica transições de estágio (ver `lifecycle`)
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from otto_flow.core.identifiers import normalize_pipeline_id, normalize_project_id
from otto_flow.core.lifecycle import ExecutionStatus, derive_pipeline_status


class _Entity(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def _parse_status(value: Any) -> Any:
    if value is None:
        return ExecutionStatus.PENDING
    return ExecutionStatus.parse(value)


class PipelineStep(_Entity):
    """Estágio persistido; `pipeline_id` é referência, não posse."""

    id: str
    pipeline_id: str
    name: str
    status: ExecutionStatus = ExecutionStatus.PENDING
    order_index: int = Field(ge=0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> Any:
        return _parse_status(value)


def normalize_step_order(steps: Iterable[PipelineStep]) -> List[PipelineStep]:
    """
    Ordena estágios por (order_index, id) e renumera 0..n-1.

    A ordenação é estável; estágios com `order_index` repetido são
    desempatados pelo id.
    """
    ordered = sorted(steps, key=lambda s: (s.order_index, s.id))
    return [
        step if step.order_index == i else step.model_copy(update={"order_index": i})
        for i, step in enumerate(ordered)
    ]


class Pipeline(_Entity):
    id: str
    name: str
    user_id: Optional[str] = None
    project_id: Optional[str] = None
    description: Optional[str] = None
    status: ExecutionStatus = ExecutionStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    steps: List[PipelineStep] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> Any:
        return _parse_status(value)

    @model_validator(mode="after")
    def _status_from_steps(self) -> "Pipeline":
        if self.steps:
            self.status = self.derived_status()
        return self

    @property
    def canonical_id(self) -> str:
        return normalize_pipeline_id(self.id)

    def order_conflicts(self) -> Dict[int, List[str]]:
        """`order_index` repetidos → ids dos estágios que o compartilham (ordenados)."""
        seen: Dict[int, List[str]] = {}
        for step in self.steps:
            seen.setdefault(step.order_index, []).append(step.id)
        return {idx: sorted(ids) for idx, ids in sorted(seen.items()) if len(ids) > 1}

    def ordered_steps(self) -> List[PipelineStep]:
        return sorted(self.steps, key=lambda s: (s.order_index, s.id))

    def with_normalized_steps(self) -> "Pipeline":
        return self.model_copy(update={"steps": normalize_step_order(self.steps)})

    def derived_status(self) -> ExecutionStatus:
        return derive_pipeline_status(s.status for s in self.ordered_steps())

    def with_derived_status(self) -> "Pipeline":
        return self.model_copy(update={"status": self.derived_status()})


class RepositoryBinding(_Entity):
    owner: Optional[str] = None
    repo_id: Optional[Union[int, str]] = None
    repo_name: Optional[str] = None
    repo_url: Optional[str] = None
    selected_branch: Optional[str] = None
    installation_id: Optional[Union[int, str]] = None


class BuildSystemBinding(_Entity):
    status: Optional[str] = None
    project_name: Optional[str] = None
    project_arn: Optional[str] = None
    log_group: Optional[str] = None
    last_error_message: Optional[str] = None


class Project(_Entity):
    """
    Projeto: possui pipelines e os vínculos externos.

    O formato de fio é plano (`github_owner`, `codebuild_status`, ...);
    `repository` e `build_system` agrupam esses campos em vínculos.
    """

    project_id: str
    name: Optional[str] = None
    description: Optional[str] = None
    user_id: Optional[str] = None
    github_owner: Optional[str] = None
    github_repo_id: Optional[Union[int, str]] = None
    github_repo_name: Optional[str] = None
    github_repo_url: Optional[str] = None
    selected_branch: Optional[str] = None
    installation_id: Optional[Union[int, str]] = None
    codebuild_status: Optional[str] = None
    codebuild_project_name: Optional[str] = None
    codebuild_project_arn: Optional[str] = None
    cloudwatch_log_group: Optional[str] = None
    codebuild_error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    pipelines: List[Pipeline] = Field(default_factory=list)

    @property
    def canonical_id(self) -> str:
        return normalize_project_id(self.project_id)

    @property
    def repository(self) -> RepositoryBinding:
        return RepositoryBinding(
            owner=self.github_owner,
            repo_id=self.github_repo_id,
            repo_name=self.github_repo_name,
            repo_url=self.github_repo_url,
            selected_branch=self.selected_branch,
            installation_id=self.installation_id,
        )

    @property
    def build_system(self) -> BuildSystemBinding:
        return BuildSystemBinding(
            status=self.codebuild_status,
            project_name=self.codebuild_project_name,
            project_arn=self.codebuild_project_arn,
            log_group=self.cloudwatch_log_group,
            last_error_message=self.codebuild_error_message,
        )
