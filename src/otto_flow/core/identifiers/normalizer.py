# src/otto_flow/core/identifiers/normalizer.py
"""
Normalizador de identificadores do Otto Flow.

Este módulo converte identificadores entre dois namespaces:
    - identificador curto (numeral decimal usado em URLs e exibição): "42"
    - identificador canônico (forma namespaced usada em storage): "proj_42"

Entidades suportadas (v1):
    - project  → prefixo `proj`
    - pipeline → prefixo `pipe`

Política leniente:
    - Entrada malformada NUNCA gera erro; o valor é devolvido inalterado.
      Isso evita quebrar a navegação em estados transitórios ruins, ao custo
      de deixar passar ids malformados silenciosamente.
    - `is_canonical` permite ao chamador distinguir um id reconhecido de um
      id que apenas atravessou sem alteração.

Invariantes:
    - denormalize(normalize(k, s)) == s para todo `s` composto só de dígitos
    - normalize é idempotente em entradas já canônicas
    - Nenhuma função deste módulo levanta exceção

Limites explícitos:
    - Não valida existência do recurso
    - Não valida o formato UUID das rotas (ver `routes`)
"""

from __future__ import annotations

import re
from enum import Enum


class EntityKind(str, Enum):
    """Entidades cujo id possui forma curta e forma canônica."""

    PROJECT = "project"
    PIPELINE = "pipeline"

    @property
    def prefix(self) -> str:
        return _PREFIXES[self]


_PREFIXES = {
    EntityKind.PROJECT: "proj",
    EntityKind.PIPELINE: "pipe",
}

_DIGITS = re.compile(r"[0-9]+")


def _coerce_kind(kind: EntityKind | str) -> EntityKind:
    return kind if isinstance(kind, EntityKind) else EntityKind(kind)


def normalize(kind: EntityKind | str, short_id: str) -> str:
    """
    Converte um id curto (só dígitos) para a forma canônica `<prefixo>_<id>`.

    Qualquer outra entrada (já canônica, UUID, vazia, malformada) é
    devolvida inalterada.

    Raises:
        ValueError: apenas se `kind` não for uma entidade conhecida; isso é
            erro de programação do chamador, não de dado.
    """
    entity = _coerce_kind(kind)
    if isinstance(short_id, str) and _DIGITS.fullmatch(short_id):
        return f"{entity.prefix}_{short_id}"
    return short_id


def denormalize(canonical_id: str) -> str:
    """
    Remove o prefixo reconhecido (`proj_` ou `pipe_`) de um id canônico.

    Devolve a substring após o primeiro `_`. Entradas sem prefixo
    reconhecido são devolvidas inalteradas.
    """
    if not isinstance(canonical_id, str):
        return canonical_id
    for prefix in _PREFIXES.values():
        if canonical_id.startswith(prefix + "_"):
            return canonical_id.split("_", 1)[1]
    return canonical_id


def is_canonical(value: str, kind: EntityKind | str | None = None) -> bool:
    """Indica se `value` carrega um prefixo reconhecido (opcionalmente de um kind específico)."""
    if not isinstance(value, str):
        return False
    if kind is None:
        prefixes = list(_PREFIXES.values())
    else:
        prefixes = [_coerce_kind(kind).prefix]
    return any(value.startswith(p + "_") for p in prefixes)


def normalize_project_id(short_id: str) -> str:
    return normalize(EntityKind.PROJECT, short_id)


def normalize_pipeline_id(short_id: str) -> str:
    return normalize(EntityKind.PIPELINE, short_id)
