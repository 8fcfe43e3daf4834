"""
Client configuration: the immutable Config record, YAML loading and
environment variable import/export.

A YAML config file looks like::

    app_key:    "YOUR APP KEY"
    secret_key: "YOUR SECRET KEY"
    endpoint:   "TAOBAO GATEWAY API URL"
    pid:        "OPTIONAL TAOBAOKE PID"

or, with one section per deployment environment::

    development:
      app_key: ...
    production:
      app_key: ...
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional, Union

import yaml

from .constants import (
    ENV_API_KEY,
    ENV_ENDPOINT,
    ENV_PID,
    ENV_SECRET_KEY,
    ENV_SELECTOR,
    REQUEST_TIMEOUT,
    REQUIRED_CONFIG_KEYS,
)
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Config:
    """Credentials and gateway settings shared by every request."""

    app_key: str
    secret_key: str = field(repr=False)
    endpoint: str
    pid: Optional[str] = None
    timeout: float = REQUEST_TIMEOUT

    def __post_init__(self):
        missing = [key for key in REQUIRED_CONFIG_KEYS if not getattr(self, key)]
        if missing:
            raise ConfigurationError(f"[{', '.join(missing)}] must not be empty.")
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Config":
        """
        Build a Config from a parsed mapping.

        Args:
            data: Mapping with ``app_key``, ``secret_key``, ``endpoint`` and
                optionally ``pid`` and ``timeout``. Other keys are ignored.

        Raises:
            ConfigurationError: If any required key is absent
        """
        missing = [key for key in REQUIRED_CONFIG_KEYS if data.get(key) is None]
        if missing:
            raise ConfigurationError(
                f"[{', '.join(missing)}] not included in your yaml file."
            )

        timeout = data.get("timeout")
        if timeout is None:
            timeout = REQUEST_TIMEOUT
        try:
            timeout = float(timeout)
        except (TypeError, ValueError) as e:
            raise ConfigurationError("timeout must be a number") from e

        pid = data.get("pid")
        return cls(
            app_key=str(data["app_key"]),
            secret_key=str(data["secret_key"]),
            endpoint=str(data["endpoint"]),
            pid=str(pid) if pid is not None else None,
            timeout=timeout,
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """Build a Config from the variables written by export_to_env()."""
        if environ is None:
            environ = os.environ
        names = {
            "app_key": ENV_API_KEY,
            "secret_key": ENV_SECRET_KEY,
            "endpoint": ENV_ENDPOINT,
        }
        missing = [name for name in names.values() if not environ.get(name)]
        if missing:
            raise ConfigurationError(
                f"[{', '.join(missing)}] not set in the environment."
            )
        return cls(
            **{key: environ[name] for key, name in names.items()},
            pid=environ.get(ENV_PID) or None,
        )


def load_config(
    config_path: Union[str, Path], environment: Optional[str] = None
) -> Config:
    """
    Load and validate client configuration from a YAML file.

    Args:
        config_path: Path to the YAML file
        environment: Section to use when the file holds one section per
            environment. Defaults to the ``OPEN_TAOBAO_ENV`` variable; when
            neither is set the top-level mapping is used.

    Returns:
        Validated Config

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ConfigurationError: If the file content is invalid or incomplete
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if environment is None:
        environment = os.environ.get(ENV_SELECTOR) or None

    if environment is not None:
        if not isinstance(data, dict) or not isinstance(data.get(environment), dict):
            raise ConfigurationError(
                f"Environment '{environment}' not found in {config_path}"
            )
        data = data[environment]

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")

    config = Config.from_mapping(data)
    logger.debug(
        "Loaded configuration from %s (environment=%s, endpoint=%s)",
        config_path, environment, config.endpoint,
    )
    return config


def export_to_env(config: Config, environ: Optional[MutableMapping[str, str]] = None):
    """
    Export configuration values to environment variables.

    ENV variables:

        TAOBAO_API_KEY    -> config.app_key
        TAOBAO_SECRET_KEY -> config.secret_key
        TAOBAO_ENDPOINT   -> config.endpoint
        TAOBAOKE_PID      -> config.pid (only when set)
    """
    if environ is None:
        environ = os.environ
    environ[ENV_API_KEY] = config.app_key
    environ[ENV_SECRET_KEY] = config.secret_key
    environ[ENV_ENDPOINT] = config.endpoint
    if config.pid is not None:
        environ[ENV_PID] = config.pid
