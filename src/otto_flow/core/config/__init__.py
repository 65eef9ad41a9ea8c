# src/otto_flow/core/config/__init__.py

"""
Camada de configuração do Otto Flow.

Este pacote carrega, mescla, valida estruturalmente e identifica a
configuração usada pelos clients de API, pelo validador de grafo e pelo
correlator de logs.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução de configuração final via deep-merge determinístico
    - Overrides explícitos por variável de ambiente (`OTTO_API_*`)
    - Geração de hash canônico (config e definição de pipeline)

Invariantes:
    - A configuração final é um dicionário puro (dict)
    - Conflitos estruturais são tratados como erro
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidConfigValueError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash, compute_definition_hash
from .loader import DEFAULTS_PATH, apply_env_overrides, default_config, load_config
from .merge import deep_merge

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidConfigValueError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "compute_definition_hash",
    "DEFAULTS_PATH",
    "apply_env_overrides",
    "default_config",
    "load_config",
    "deep_merge",
]
