# src/otto_flow/api/__init__.py
"""
Clients HTTP das APIs consumidas pelo Otto Flow.

Componentes:
    - client    → ApiClient (bearer token, mapeamento de falhas)
    - pipelines → GraphStoreClient (GET/PUT da definição do grafo)
    - builds    → BuildClient (disparo e status de builds)
    - logs      → LogQueryClient (consulta de logs por escopo)
    - factory   → montagem a partir da configuração
"""

from .builds import BuildClient
from .client import ApiClient, client_from_config
from .factory import OttoServices, services_from_config
from .logs import LogQueryClient
from .pipelines import GraphStoreClient

__all__ = [
    "ApiClient",
    "BuildClient",
    "GraphStoreClient",
    "LogQueryClient",
    "OttoServices",
    "client_from_config",
    "services_from_config",
]
