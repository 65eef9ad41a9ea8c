# src/otto_flow/core/config/merge.py
"""
Deep-merge da configuração do Otto Flow.

Resolve o `local.yaml` do operador sobre os defaults empacotados
(`api`, `validation`, `logs`).

Regras por tipo de valor (v1):
    - mapa sobre mapa → mescla chave a chave, recursivamente
    - lista → substitui a lista base inteira (ex.: `required_keys.deploy`)
    - escalar → substitui o valor base
    - int/float → compatíveis entre si (ex.: timeout 30 → 12.5)
    - tipos incompatíveis → `ConfigTypeConflictError` com o caminho pontuado

Invariantes:
    - Saída determinística para a mesma entrada
    - Chaves ausentes no override mantêm o valor base
    - `base` e `override` não são alterados

Limites explícitos:
    - Não lê arquivos
    - Não conhece NodeKind, timelines ou URLs
"""

from copy import deepcopy
from typing import Any, Dict, Tuple

from .errors import ConfigTypeConflictError


_NUMERIC = (int, float)


def _compatible(base_value: Any, override_value: Any) -> bool:
    if type(base_value) is type(override_value):
        return True
    # bool é subclasse de int: nunca tratar como numérico
    if isinstance(base_value, bool) or isinstance(override_value, bool):
        return False
    return isinstance(base_value, _NUMERIC) and isinstance(override_value, _NUMERIC)


def _merge(base: Dict[str, Any], override: Dict[str, Any], path: Tuple[str, ...]) -> Dict[str, Any]:
    result: Dict[str, Any] = deepcopy(base)

    for key, override_value in override.items():
        if key not in result:
            result[key] = deepcopy(override_value)
            continue

        base_value = result[key]

        if isinstance(base_value, dict) and isinstance(override_value, dict):
            result[key] = _merge(base_value, override_value, path + (str(key),))
            continue

        if isinstance(override_value, list):
            result[key] = deepcopy(override_value)
            continue

        # None no base significa "sem valor padrão": qualquer tipo é aceito
        if base_value is not None and not _compatible(base_value, override_value):
            dotted = ".".join(path + (str(key),))
            raise ConfigTypeConflictError(
                f"Conflito de tipo na chave '{dotted}': "
                f"{type(base_value).__name__} vs {type(override_value).__name__}"
            )

        result[key] = deepcopy(override_value)

    return result


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Mescla `override` sobre `base` e devolve um novo dicionário.

    Raises:
        ConfigTypeConflictError: Raiz não-dict, ou chave com tipos
            incompatíveis (a mensagem traz o caminho, ex.: `api.timeout_seconds`).
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            "Raiz da configuração precisa ser mapa nos dois lados: "
            f"{type(base).__name__} / {type(override).__name__}"
        )
    return _merge(base, override, ())
