"""
Otto Flow — Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do Otto Flow.

Objetivo:
- Permitir que o core e os clients levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para OttoErrorPayload
- Evitar ValueError/RuntimeError genéricos nas fronteiras críticas

Regras:
- Condições esperadas (grafos inválidos, transições retroativas) são
  VALORES retornados pelo core, não exceções. As exceções abaixo existem
  para os chamadores que preferem o fluxo de exceção (ex.: `assert_can_run`)
  e para a fronteira remota.
- Exceções devem carregar apenas dados estruturados (serializáveis).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .errors import (
    AUTHENTICATION_REQUIRED,
    GRAPH_VALIDATION_FAILED,
    INVARIANT_VIOLATION,
    REMOTE_FAILURE,
    RESOURCE_NOT_FOUND,
    OttoErrorPayload,
)


@dataclass(frozen=True)
class OttoException(Exception):
    """Base class para exceções internas do Otto Flow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    decision_required: bool = False

    # código estável usado em `to_payload`; subclasses sobrescrevem
    code = "OTTO_ERROR"

    def __str__(self) -> str:  # pragma: no cover
        return self.message

    @classmethod
    def from_payload(cls, payload: OttoErrorPayload) -> "OttoException":
        return cls(
            message=payload.message,
            details=dict(payload.details or {}),
            hint=payload.hint,
            decision_required=payload.decision_required,
        )

    def to_payload(self) -> OttoErrorPayload:
        return OttoErrorPayload(
            type=self.code,
            message=self.message,
            details=dict(self.details or {}),
            hint=self.hint,
            decision_required=self.decision_required,
        )


# ---------------------------------------------------------------------------
# Grafo
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GraphValidationError(OttoException):
    """Grafo viola regras bloqueantes para a ação solicitada (save/run)."""

    code = GRAPH_VALIDATION_FAILED

    @property
    def violations(self) -> List[Dict[str, Any]]:
        return list(self.details.get("violations", []))


@dataclass(frozen=True)
class InvariantViolation(OttoException):
    """Estado impossível detectado (ex.: nó ausente após validação aprovada)."""

    code = INVARIANT_VIOLATION


# ---------------------------------------------------------------------------
# Fronteira remota
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RemoteFailure(OttoException):
    """API remota retornou erro ou está inacessível (sem retry automático)."""

    code = REMOTE_FAILURE

    @property
    def status_code(self) -> Optional[int]:
        return self.details.get("status_code")


@dataclass(frozen=True)
class NotFound(RemoteFailure):
    """Recurso remoto não existe (HTTP 404)."""

    code = RESOURCE_NOT_FOUND


@dataclass(frozen=True)
class AuthenticationRequired(OttoException):
    """Credencial ausente ou expirada; o chamador deve redirecionar para login."""

    code = AUTHENTICATION_REQUIRED
