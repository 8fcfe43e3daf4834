"""
Canonical parameter serialization and MD5 request signing.

The gateway recomputes the signature from the parameters it receives, so
the sign string built here has to match its rules byte for byte:
every entry is rendered as ``key + value``, the rendered strings are sorted
as a whole and joined without separator, then wrapped with the secret on
both sides and hashed with MD5 (hex, uppercase).
"""

import hashlib
from decimal import Decimal
from enum import Enum
from typing import Mapping, Union
from urllib.parse import quote_plus

from .constants import PARAM_SIGN

ParamValue = Union[str, int, float, Decimal, bool, Enum]
ParameterSet = Mapping[str, ParamValue]


def render_value(value: ParamValue) -> str:
    """
    Render a parameter value as it is sent on the wire.

    Args:
        value: String, number, boolean or enum member

    Returns:
        Wire representation of the value

    Raises:
        TypeError: If the value has no canonical rendering
    """
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    raise TypeError(
        f"Unsupported parameter value {value!r} of type {type(value).__name__}"
    )


def to_sign_string(params: ParameterSet) -> str:
    """Concatenate ``key + value`` pairs sorted on the concatenated string."""
    pairs = [f"{key}{render_value(value)}" for key, value in params.items()]
    return "".join(sorted(pairs))


def to_query_string(params: ParameterSet) -> str:
    """
    Build a form-urlencoded query string in insertion order.

    Values are percent-encoded with ``quote_plus``; keys are emitted as given.
    """
    return "&".join(
        f"{key}={quote_plus(render_value(value))}" for key, value in params.items()
    )


def wrap_with_secret(payload: str, secret_key: str) -> str:
    return f"{secret_key}{payload}{secret_key}"


def sign(params: ParameterSet, secret_key: str) -> str:
    """
    Compute the request signature for a parameter set.

    An existing ``sign`` entry is ignored, so a signed set can be re-verified.

    Args:
        params: Complete parameter set (system and business parameters)
        secret_key: Shared application secret

    Returns:
        32 character uppercase hex MD5 digest
    """
    unsigned = {key: value for key, value in params.items() if key != PARAM_SIGN}
    message = wrap_with_secret(to_sign_string(unsigned), secret_key)
    return hashlib.md5(message.encode("utf-8")).hexdigest().upper()
