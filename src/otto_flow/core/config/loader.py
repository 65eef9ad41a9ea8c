# src/otto_flow/core/config/loader.py
"""
Resolução da configuração efetiva do Otto Flow.

Camadas, da menor para a maior precedência:
    1. defaults (obrigatório; o pacote embarca `defaults.yaml`)
    2. arquivo local do operador (opcional; ignorado se não existir)
    3. ambiente explícito (`OTTO_API_BASE_URL`, `OTTO_API_TIMEOUT_SECONDS`)

Consumidores:
    - `api.client_from_config`   → seção `api`
    - validador de grafo         → `validation.required_keys`
    - `LogQueryClient`           → `logs.default_timeline`

Invariantes:
    - Arquivo de defaults ausente é erro fatal
    - O resultado é um `dict` puro, validado nas seções conhecidas
    - Seções desconhecidas passam adiante sem validação
    - Nenhuma camada altera a anterior

Limites explícitos:
    - Não lê `os.environ` implicitamente
    - Não abre conexões de rede
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional
import json

import yaml  # PyYAML

from .merge import deep_merge
from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidConfigValueError,
    UnsupportedConfigFormatError,
)


DEFAULTS_PATH = Path(__file__).with_name("defaults.yaml")

# variável de ambiente -> (seção, chave, conversor)
_ENV_OVERRIDES = {
    "OTTO_API_BASE_URL": ("api", "base_url", str),
    "OTTO_API_TIMEOUT_SECONDS": ("api", "timeout_seconds", float),
}


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Lê um arquivo YAML (.yaml/.yml) ou JSON (.json) como mapa.

    Arquivo vazio vale `{}`.

    Raises:
        DefaultsNotFoundError: Arquivo inexistente.
        UnsupportedConfigFormatError: Extensão fora de YAML/JSON.
        InvalidConfigRootTypeError: Raiz que não é mapa (lista, escalar).
    """
    if not path.exists():
        raise DefaultsNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def _validate_sections(config: Dict[str, Any]) -> None:
    """Valida apenas as seções conhecidas; chaves desconhecidas são preservadas."""
    api = config.get("api", {}) or {}
    if not isinstance(api, dict):
        raise InvalidConfigValueError("Seção 'api' deve ser um mapa")
    timeout = api.get("timeout_seconds")
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise InvalidConfigValueError(
                f"api.timeout_seconds deve ser número > 0, recebido: {timeout!r}"
            )

    validation = config.get("validation", {}) or {}
    if not isinstance(validation, dict):
        raise InvalidConfigValueError("Seção 'validation' deve ser um mapa")
    required = validation.get("required_keys", {}) or {}
    if not isinstance(required, dict):
        raise InvalidConfigValueError("validation.required_keys deve ser um mapa kind -> lista")

    # import tardio: graph não depende de config
    from otto_flow.core.graph.types import NodeKind

    known = {k.value for k in NodeKind}
    for kind, keys in required.items():
        if kind not in known:
            raise InvalidConfigValueError(
                f"validation.required_keys referencia kind desconhecido: {kind!r}"
            )
        if not isinstance(keys, list) or not all(isinstance(k, str) for k in keys):
            raise InvalidConfigValueError(
                f"validation.required_keys.{kind} deve ser lista de strings"
            )


def apply_env_overrides(config: Dict[str, Any], environ: Mapping[str, str]) -> Dict[str, Any]:
    """
    Aplica overrides de ambiente conhecidos (`OTTO_API_BASE_URL`,
    `OTTO_API_TIMEOUT_SECONDS`) sobre uma configuração já resolvida.

    Retorna uma nova configuração; o input não é mutado.
    """
    override: Dict[str, Any] = {}
    for var, (section, key, convert) in _ENV_OVERRIDES.items():
        raw = environ.get(var)
        if raw is None or raw == "":
            continue
        try:
            value = convert(raw)
        except ValueError as e:
            raise InvalidConfigValueError(f"{var} inválido: {raw!r}") from e
        override.setdefault(section, {})[key] = value

    return deep_merge(config, override)


def load_config(
    *,
    defaults_path: str,
    local_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Resolve defaults → local → ambiente e valida as seções conhecidas.

    Args:
        defaults_path: Arquivo base; obrigatório.
        local_path: Overrides do operador; um caminho inexistente é ignorado.
        environ: Ambiente a consultar (ex.: `os.environ`); `None` desliga a
            camada de ambiente.

    Raises:
        ConfigError: Qualquer subclasse (arquivo ausente, formato, raiz,
            conflito de merge, valor inválido em `api`/`validation`).
    """
    defaults = _load_file(Path(defaults_path))

    effective = defaults

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(defaults, _load_file(local_file))

    if environ is not None:
        effective = apply_env_overrides(effective, environ)

    _validate_sections(effective)
    return effective


def default_config(
    *,
    local_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Resolve a configuração a partir dos defaults empacotados com o Otto Flow."""
    return load_config(defaults_path=str(DEFAULTS_PATH), local_path=local_path, environ=environ)
