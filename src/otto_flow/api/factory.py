# src/otto_flow/api/factory.py
"""
Montagem dos clients a partir da configuração carregada.

Usa as seções:
    - api.base_url / api.api_prefix / api.timeout_seconds
    - validation.required_keys (repassado à validação de save/run)
    - logs.default_timeline
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

import httpx

from .builds import BuildClient
from .client import ApiClient, client_from_config
from .logs import LogQueryClient
from .pipelines import GraphStoreClient


@dataclass
class OttoServices:
    api: ApiClient
    graphs: GraphStoreClient
    builds: BuildClient
    logs: LogQueryClient

    def close(self) -> None:
        self.api.close()


def services_from_config(
    config: Mapping[str, Any],
    token: Optional[str],
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> OttoServices:
    api = client_from_config(config, token, transport=transport)
    required = (config.get("validation") or {}).get("required_keys") or None
    default_timeline = (config.get("logs") or {}).get("default_timeline", "all-time")
    return OttoServices(
        api=api,
        graphs=GraphStoreClient(api, required_keys=required),
        builds=BuildClient(api, required_keys=required),
        logs=LogQueryClient(api, default_timeline=default_timeline),
    )
