"""Configuration loading from YAML files with environment variable support."""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from dotenv import dotenv_values

from .core.exceptions import ConfigurationError

logger = logging.getLogger("llm-gateway")

# Default path to the config file (relative to project root)
DEFAULT_CONFIG_PATH = "configs/config_default.yaml"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000
DEFAULT_TIMEOUT = 60.0

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


@dataclass(frozen=True)
class GatewaySettings:
    """Immutable gateway settings, built once and passed to components."""

    upstream_url: str
    provider: str
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        object.__setattr__(self, "upstream_url", self.upstream_url.rstrip("/"))

    @property
    def provider_key(self) -> str:
        return self.provider.lower()

    @property
    def models_url(self) -> str:
        return f"{self.upstream_url}/backend-api/v2/models"

    @property
    def providers_url(self) -> str:
        return f"{self.upstream_url}/v1/providers"

    @property
    def completions_url(self) -> str:
        return f"{self.upstream_url}/v1/chat/completions"


def resolve_config_path(path: str) -> Path:
    """Resolve config path relative to project root if needed."""
    if Path(path).is_absolute():
        return Path(path)
    project_root = Path(__file__).parent.parent
    return project_root / path


def resolve_env_path(config_path: Path, env_path: str | None = None) -> Path:
    """Resolve the env file path for a config file."""
    if env_path:
        return resolve_config_path(env_path)
    stem = config_path.stem
    if stem.startswith("config_"):
        suffix = stem[len("config_"):]
        return config_path.with_name(f".env_{suffix}")
    return config_path.with_name(".env")


def load_env_values(env_path: Path) -> dict[str, str]:
    """Load environment values from a .env file without mutating os.environ."""
    if not env_path.exists():
        return {}
    raw_values = dotenv_values(env_path)
    return {key: value for key, value in raw_values.items() if value is not None}


def load_config(
    path: str | None = None,
    env_path: str | None = None,
    substitute_env: bool = True,
) -> dict:
    """Load configuration from a YAML file.

    Args:
        path: Path to the config file. Defaults to LLM_GATEWAY_CONFIG,
              or configs/config_default.yaml in the project root.
        env_path: Optional .env path override for env substitution.
        substitute_env: Whether to substitute environment variables in the config.

    Returns:
        Parsed configuration dictionary.
    """
    if path is None:
        path = os.getenv("LLM_GATEWAY_CONFIG") or DEFAULT_CONFIG_PATH

    config_path = resolve_config_path(path)

    logger.info(f"Loading configuration from {config_path}")

    if not config_path.exists():
        logger.error(f"Config file not found: {config_path}")
        raise RuntimeError(f"Config file not found: {config_path}")

    env_values: dict[str, str] = {}
    if substitute_env:
        env_file = resolve_env_path(config_path, env_path)
        if env_file.exists():
            logger.info(f"Loading environment variables from {env_file}")
            env_values = load_env_values(env_file)

    with config_path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}

    if substitute_env:
        data = _substitute_env_vars(data, env_values)

    logger.info(f"Configuration loaded successfully from {config_path}")
    return data


def load_settings(
    config: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> GatewaySettings:
    """Build GatewaySettings from a config mapping and the environment.

    Environment variables take priority over the ``gateway_settings``
    section of the config file:

    - LLM_UPSTREAM: upstream base URL
    - LLM_PROXY_PROVIDER: provider identifier served by this gateway
    - LLM_GATEWAY_HOST / LLM_GATEWAY_PORT: bind address

    Raises:
        ConfigurationError: If no upstream URL is configured.
    """
    environ = os.environ if environ is None else environ
    gateway_cfg = (config or {}).get("gateway_settings") or {}
    server_cfg = gateway_cfg.get("server") or {}

    upstream = environ.get("LLM_UPSTREAM") or gateway_cfg.get("upstream")
    if not upstream:
        raise ConfigurationError(
            "No upstream configured. Set LLM_UPSTREAM or gateway_settings.upstream"
        )

    provider = environ.get("LLM_PROXY_PROVIDER")
    if provider is None:
        provider = gateway_cfg.get("provider")
    provider = str(provider or "")
    if not provider:
        logger.warning(
            "No provider configured (LLM_PROXY_PROVIDER); /v1/models will not match any model"
        )

    host = environ.get("LLM_GATEWAY_HOST") or str(server_cfg.get("host", DEFAULT_HOST))
    port = _to_int(environ.get("LLM_GATEWAY_PORT"))
    if port is None:
        port = _to_int(server_cfg.get("port")) or DEFAULT_PORT

    timeout = gateway_cfg.get("timeout", DEFAULT_TIMEOUT)
    try:
        timeout = float(timeout)
    except (TypeError, ValueError):
        logger.warning(f"Invalid gateway_settings.timeout {timeout!r}, using {DEFAULT_TIMEOUT}s")
        timeout = DEFAULT_TIMEOUT

    return GatewaySettings(
        upstream_url=str(upstream),
        provider=provider,
        host=host,
        port=port,
        timeout=timeout,
    )


def _to_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _substitute_env_vars(
    obj: Any, env_values: Mapping[str, str] | None = None
) -> Any:
    """Recursively substitute environment variables in configuration values.

    Supports ``${VAR_NAME}`` and ``$VAR_NAME``. Values from the .env file win
    over the process environment. Unknown variables keep their placeholder.
    """
    env_values = env_values or {}

    if isinstance(obj, dict):
        return {k: _substitute_env_vars(v, env_values) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_substitute_env_vars(item, env_values) for item in obj]
    if isinstance(obj, str):
        def replace_var(match):
            var_name = match.group(1) or match.group(2)
            value = env_values.get(var_name)
            if value is None:
                value = os.getenv(var_name)
            if value is None:
                logger.warning(
                    f"CONFIG ERROR: Environment variable '${var_name}' is not set! "
                    f"The literal placeholder will be used."
                )
                return match.group(0)
            return value

        return _ENV_PATTERN.sub(replace_var, obj)
    return obj
