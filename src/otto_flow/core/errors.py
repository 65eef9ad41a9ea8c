"""
Otto Flow — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Otto Flow.
Erros são considerados artefatos de domínio e fazem parte do contrato
operacional do sistema, devendo ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis

Taxonomia (v1):
- GRAPH_VALIDATION_FAILED  → grafo viola regras estruturais (bloqueia save/run)
- STATUS_CONFLICT          → update de status fora de ordem (descartado localmente)
- REMOTE_FAILURE           → API remota falhou ou está inacessível
- AUTHENTICATION_REQUIRED  → credencial ausente ou expirada
- RESOURCE_NOT_FOUND       → recurso remoto inexistente
- INVARIANT_VIOLATION      → estado impossível após validação (falha ruidosa)

Nenhuma decisão implícita é permitida.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OttoErrorPayload:
    """
    Payload canônico de erro do Otto Flow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    - decision_required: indica que o fluxo está bloqueado aguardando decisão
      humana (ex.: reautenticação)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    decision_required: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Grafo / Validação
GRAPH_VALIDATION_FAILED = "GRAPH_VALIDATION_FAILED"

# Ciclo de vida de status
STATUS_CONFLICT = "STATUS_CONFLICT"

# Fronteira remota
REMOTE_FAILURE = "REMOTE_FAILURE"
AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

# Invariantes internas
INVARIANT_VIOLATION = "INVARIANT_VIOLATION"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def graph_validation_failed(
    *,
    violations: List[Dict[str, Any]],
    action: str,
    hint: str = "Corrija as violações listadas no editor de pipeline antes de salvar ou executar.",
) -> OttoErrorPayload:
    return OttoErrorPayload(
        type=GRAPH_VALIDATION_FAILED,
        message="Definição de pipeline inválida",
        details={
            "action": action,
            "violations": violations,
        },
        hint=hint,
        decision_required=False,
    )


def status_conflict(
    *,
    subject_id: str,
    current: str,
    attempted: str,
    hint: str = "Nenhuma ação necessária: o update conflitante foi descartado e o estado atual foi mantido.",
) -> OttoErrorPayload:
    return OttoErrorPayload(
        type=STATUS_CONFLICT,
        message="Transição de status rejeitada",
        details={
            "subject_id": subject_id,
            "current": current,
            "attempted": attempted,
        },
        hint=hint,
        decision_required=False,
    )


def remote_failure(
    *,
    endpoint: Optional[str] = None,
    status_code: Optional[int] = None,
    reason: Optional[str] = None,
    hint: str = "Verifique a disponibilidade do serviço remoto. Nenhum retry é aplicado automaticamente.",
) -> OttoErrorPayload:
    return OttoErrorPayload(
        type=REMOTE_FAILURE,
        message="Falha na comunicação com o serviço remoto",
        details={
            "endpoint": endpoint,
            "status_code": status_code,
            "reason": reason,
        },
        hint=hint,
        decision_required=False,
    )


def authentication_required(
    *,
    endpoint: Optional[str] = None,
    status_code: Optional[int] = None,
    hint: str = "Refaça o login no provedor de identidade para obter um novo token.",
) -> OttoErrorPayload:
    return OttoErrorPayload(
        type=AUTHENTICATION_REQUIRED,
        message="Autenticação necessária",
        details={
            "endpoint": endpoint,
            "status_code": status_code,
        },
        hint=hint,
        decision_required=True,
    )


def resource_not_found(
    *,
    endpoint: Optional[str] = None,
    resource_id: Optional[str] = None,
    hint: str = "Confirme o identificador solicitado; o recurso pode ter sido removido.",
) -> OttoErrorPayload:
    return OttoErrorPayload(
        type=RESOURCE_NOT_FOUND,
        message="Recurso não encontrado",
        details={
            "endpoint": endpoint,
            "resource_id": resource_id,
        },
        hint=hint,
        decision_required=False,
    )
