# src/otto_flow/core/results.py
"""
Tipos explícitos de estado de consulta.

Substituem flags mutáveis de loading/error por um valor único:

    Idle | Loading | Success(value) | Failure(error)

A orquestração assíncrona pertence à camada de transporte; aqui apenas
se representa o estado e se converte o resultado de uma chamada síncrona.

Regras:
    - `OttoException` vira `Failure` com o payload canônico
    - Qualquer outra exceção propaga (é bug, não estado)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

from otto_flow.core.errors import AUTHENTICATION_REQUIRED, OttoErrorPayload
from otto_flow.core.exceptions import OttoException

T = TypeVar("T")


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    error: OttoErrorPayload

    @property
    def requires_authentication(self) -> bool:
        return self.error.decision_required and self.error.type == AUTHENTICATION_REQUIRED


QueryState = Union[Idle, Loading, Success[Any], Failure]


def from_call(fn: Callable[..., T], *args: Any, **kwargs: Any) -> Union[Success[T], Failure]:
    """Executa `fn` e encapsula o desfecho em `Success` ou `Failure`."""
    try:
        return Success(fn(*args, **kwargs))
    except OttoException as exc:
        return Failure(exc.to_payload())
