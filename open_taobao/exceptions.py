"""
Custom exceptions for the Taobao Open Platform client.
"""

import json
from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    """Coarse category of a client failure."""
    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    DECODE = "decode"
    API = "api"


class OpenTaobaoError(Exception):
    """Base exception for client errors."""
    kind: Optional[ErrorKind] = None


class ConfigurationError(OpenTaobaoError):
    """Raised when required configuration is missing or invalid."""
    kind = ErrorKind.CONFIGURATION


class TransportError(OpenTaobaoError):
    """Raised when the HTTP call itself fails (connection, timeout, TLS)."""
    kind = ErrorKind.TRANSPORT


class DecodeError(OpenTaobaoError, ValueError):
    """Raised when a response body is not valid JSON."""
    kind = ErrorKind.DECODE

    def __init__(self, message: str, body: bytes = b""):
        super().__init__(message)
        self.body = body


class ApiError(OpenTaobaoError):
    """
    Raised by the strict call surface when the gateway answers with an
    ``error_response`` envelope.

    The message is the JSON serialization of the envelope content.
    """
    kind = ErrorKind.API

    def __init__(self, error: Any):
        super().__init__(json.dumps(error, ensure_ascii=False, separators=(',', ':')))
        self.error = error

    def _field(self, name: str) -> Any:
        if isinstance(self.error, dict):
            return self.error.get(name)
        return None

    @property
    def code(self) -> Any:
        return self._field("code")

    @property
    def msg(self) -> Optional[str]:
        return self._field("msg")

    @property
    def sub_code(self) -> Optional[str]:
        return self._field("sub_code")

    @property
    def sub_msg(self) -> Optional[str]:
        return self._field("sub_msg")
