# src/otto_flow/core/config/hashing.py
"""
Hashing canônico do Otto Flow.

Este módulo gera hashes determinísticos de estruturas JSON-compatíveis:
    - a configuração efetiva (`compute_config_hash`)
    - a definição de um pipeline (`compute_definition_hash`), usada pelo
      chamador para detectar se o rascunho do editor diverge da versão
      persistida

Política de hashing (v1):
    - Serialização JSON canônica (chaves ordenadas, separadores compactos)
    - Codificação UTF-8
    - Algoritmo SHA-256

Invariantes:
    - Estruturas equivalentes produzem o mesmo hash
    - O valor gerado é sempre uma string hexadecimal de 64 caracteres
    - Nenhuma mutação ocorre sobre o input

Limites explícitos:
    - Não persiste o hash
    - Não inclui informações de ambiente ou runtime
"""

import hashlib
import json
from typing import Any, Dict


def _canonical_sha256(payload: Any) -> str:
    canonical_json = json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico da configuração efetiva.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )
    return _canonical_sha256(config)


def compute_definition_hash(definition: Dict[str, Any]) -> str:
    """
    Gera o fingerprint de uma definição de pipeline (formato `PipelineFlowData`).

    O `viewport` é excluído: é estado de apresentação e não deve marcar o
    rascunho como alterado quando o usuário apenas move a câmera.

    Raises:
        TypeError: Se a definição não for um dicionário.
    """
    if not isinstance(definition, dict):
        raise TypeError(
            f"Definição para hashing deve ser dict, recebido: {type(definition).__name__}"
        )
    relevant = {k: v for k, v in definition.items() if k != "viewport"}
    return _canonical_sha256(relevant)
