# src/otto_flow/api/client.py
"""
Client HTTP base das APIs consumidas pelo Otto Flow.

Responsabilidades:
    - Montar URLs a partir de `base_url` + `api_prefix`
    - Anexar o bearer token obtido da camada de sessão
    - Mapear falhas HTTP/transporte para exceções canônicas

Mapeamento de falhas:
    - token ausente        → AuthenticationRequired (nenhuma requisição é feita)
    - 401 / 403            → AuthenticationRequired
    - 404                  → NotFound
    - demais status >= 400 → RemoteFailure
    - timeout / transporte → RemoteFailure
    - JSON inválido        → RemoteFailure

Limites explícitos:
    - Um ciclo requisição/resposta por chamada, sem retry nem backoff
    - Não renova tokens
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from otto_flow.core.errors import authentication_required, remote_failure, resource_not_found
from otto_flow.core.exceptions import AuthenticationRequired, NotFound, RemoteFailure

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_API_PREFIX = "/api/v1"


class ApiClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        *,
        api_prefix: str = DEFAULT_API_PREFIX,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Args:
            base_url: URL base do backend (ex.: http://localhost:4000).
            token: Bearer token da sessão; `None` faz toda chamada levantar
                `AuthenticationRequired`.
            api_prefix: Prefixo das rotas versionadas.
            timeout: Timeout por requisição, em segundos.
            transport: Transporte httpx alternativo (testes).
        """
        self.base_url = base_url.rstrip("/")
        self.api_prefix = "/" + api_prefix.strip("/") if api_prefix.strip("/") else ""
        self.token = token
        self.http_client = httpx.Client(
            base_url=self.base_url,
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )
        logger.debug("ApiClient initialized for base URL: %s", self.base_url)

    def close(self) -> None:
        self.http_client.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def endpoint(self, path: str) -> str:
        return f"{self.api_prefix}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """
        Executa uma requisição e devolve o corpo JSON decodificado.

        Returns:
            Any: Corpo decodificado, ou `None` para resposta sem conteúdo.

        Raises:
            AuthenticationRequired: Token ausente, 401 ou 403.
            NotFound: 404.
            RemoteFailure: Demais falhas remotas.
        """
        endpoint = self.endpoint(path)
        if not self.token:
            logger.warning("No bearer token available for %s %s", method, endpoint)
            raise AuthenticationRequired.from_payload(authentication_required(endpoint=endpoint))

        headers: Dict[str, str] = {"Authorization": f"Bearer {self.token}"}
        try:
            logger.debug("Request: %s %s params=%s", method, endpoint, params)
            response = self.http_client.request(method, endpoint, json=json, params=params, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error("API error %s calling %s %s: %s", status, method, endpoint, e.response.text[:500])
            if status in (401, 403):
                raise AuthenticationRequired.from_payload(
                    authentication_required(endpoint=endpoint, status_code=status)
                ) from e
            if status == 404:
                raise NotFound.from_payload(
                    resource_not_found(endpoint=endpoint, resource_id=path.rstrip("/").rsplit("/", 1)[-1])
                ) from e
            raise RemoteFailure.from_payload(
                remote_failure(endpoint=endpoint, status_code=status, reason=_error_reason(e.response))
            ) from e
        except httpx.TimeoutException as e:
            logger.error("Request timeout: %s %s", method, endpoint)
            raise RemoteFailure.from_payload(remote_failure(endpoint=endpoint, reason="timeout")) from e
        except httpx.RequestError as e:
            logger.error("Request error: %s %s - %s", method, endpoint, e)
            raise RemoteFailure.from_payload(remote_failure(endpoint=endpoint, reason=str(e))) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error("Invalid JSON from %s %s: %s", method, endpoint, response.text[:500])
            raise RemoteFailure.from_payload(
                remote_failure(endpoint=endpoint, status_code=response.status_code, reason="invalid_json")
            ) from e


def _error_reason(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            if body.get(key):
                return str(body[key])
    return response.reason_phrase


def client_from_config(
    config: Mapping[str, Any],
    token: Optional[str],
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> ApiClient:
    """Constrói um `ApiClient` a partir da seção `api` da configuração carregada."""
    api = config.get("api") or {}
    return ApiClient(
        base_url=str(api.get("base_url")),
        token=token,
        api_prefix=str(api.get("api_prefix", DEFAULT_API_PREFIX)),
        timeout=float(api.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
        transport=transport,
    )
