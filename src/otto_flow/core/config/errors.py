# src/otto_flow/core/config/errors.py
"""
Exceções canônicas da camada de configuração do Otto Flow.

As exceções aqui definidas representam **violações estruturais
explícitas** do arquivo de configuração, e não erros de domínio do
grafo de pipeline ou da fronteira remota.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa falha de validação de grafo ou de API

Limites explícitos:
    - Não realiza fallback ou recovery
    - Não depende de graph, lifecycle ou api
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do Otto Flow.

    Permite captura genérica de erros de configuração e distinção clara
    entre falhas estruturais de config e falhas de execução.
    """


class DefaultsNotFoundError(ConfigError):
    """
    Arquivo de configuração base (defaults) não encontrado.

    O arquivo de defaults é obrigatório; o loader não tenta inferir
    nem criar defaults automaticamente.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Formato do arquivo de configuração não suportado.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """Conteúdo raiz da configuração não é um dicionário (`dict`)."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"api": {"timeout_seconds": 30}}
        - override: {"api": "http://localhost"}

    Nenhum merge parcial é produzido em caso de conflito.
    """


class InvalidConfigValueError(ConfigError):
    """
    Valor estruturalmente inválido em uma seção conhecida.

    Exemplos:
        - `api.timeout_seconds` não numérico ou <= 0
        - `validation.required_keys` referenciando kind inexistente
    """
