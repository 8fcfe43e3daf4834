"""
Taobao Open Platform client

A Python client library that signs requests with the gateway's shared-secret
MD5 scheme and returns the decoded JSON responses.

Example usage:
    from open_taobao import Config, TaobaoClient

    config = Config(app_key="12345678", secret_key="secret",
                    endpoint="https://gw.api.taobao.com/router/rest")
    with TaobaoClient(config) as client:
        result = client.get_strict({"method": "taobao.time.get"})
"""

from .client import TaobaoClient, compose, check_result, parse_result, load
from .config import Config, load_config, export_to_env
from .exceptions import (
    ErrorKind,
    OpenTaobaoError,
    ConfigurationError,
    TransportError,
    DecodeError,
    ApiError
)
from .signing import render_value, sign, to_query_string, to_sign_string
from .constants import (
    API_VERSION,
    REQUEST_TIMEOUT,
    USER_AGENT,
    VERSION
)

__version__ = VERSION
__author__ = "open_taobao contributors"
__all__ = [
    "TaobaoClient",
    "compose",
    "check_result",
    "parse_result",
    "load",
    "Config",
    "load_config",
    "export_to_env",
    "ErrorKind",
    "OpenTaobaoError",
    "ConfigurationError",
    "TransportError",
    "DecodeError",
    "ApiError",
    "render_value",
    "sign",
    "to_query_string",
    "to_sign_string",
    "API_VERSION",
    "REQUEST_TIMEOUT",
    "USER_AGENT",
    "VERSION",
]
