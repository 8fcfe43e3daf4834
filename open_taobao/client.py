"""
Signed-request client for the Taobao Open Platform gateway.

Every call merges the caller's parameters over the system parameters,
signs the result with the shared secret and sends it with GET or POST.
Responses are decoded JSON; the strict variants additionally turn an
``error_response`` envelope into an ApiError.
"""

import datetime
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

import requests
from requests.adapters import HTTPAdapter

from .config import Config, load_config
from .constants import (
    API_VERSION,
    ERROR_RESPONSE_KEY,
    FORM_CONTENT_TYPE,
    PARAM_APP_KEY,
    PARAM_FORMAT,
    PARAM_METHOD,
    PARAM_SIGN,
    PARAM_SIGN_METHOD,
    PARAM_TIMESTAMP,
    PARAM_VERSION,
    POOL_MAXSIZE,
    RESPONSE_FORMAT,
    SIGN_METHOD,
    TIMESTAMP_FORMAT,
    USER_AGENT,
)
from .exceptions import ApiError, DecodeError, TransportError
from .signing import ParameterSet, sign, to_query_string

logger = logging.getLogger(__name__)

# Signed GET urls carry the signature in their query string
_QUERY_RE = re.compile(r"\?[^\s'\"]*")


def _strip_query(text: str) -> str:
    return _QUERY_RE.sub("", text)


def compose(
    params: ParameterSet, config: Config, now: Optional[datetime.datetime] = None
) -> Dict[str, Any]:
    """
    Merge caller parameters with the gateway's system parameters.

    System parameters are laid down first and the caller's entries are
    overlaid on top, so a caller-supplied key always wins. The merge is
    flat and returns a new dict; ``params`` is left untouched.

    Args:
        params: Business parameters for the call
        config: Client configuration providing ``app_key``
        now: Request time, defaults to the current local time

    Returns:
        Composed parameter set, not yet signed
    """
    if now is None:
        now = datetime.datetime.now()

    composed: Dict[str, Any] = {
        PARAM_TIMESTAMP: now.strftime(TIMESTAMP_FORMAT),
        PARAM_VERSION: API_VERSION,
        PARAM_FORMAT: RESPONSE_FORMAT,
        PARAM_SIGN_METHOD: SIGN_METHOD,
        PARAM_APP_KEY: config.app_key,
    }
    composed.update(params)
    return composed


def parse_result(body: Union[bytes, str]) -> Any:
    """
    Decode a gateway response body.

    Raises:
        DecodeError: If the body is not valid JSON
    """
    try:
        return json.loads(body)
    except ValueError as e:
        raw = body if isinstance(body, bytes) else body.encode("utf-8")
        raise DecodeError(f"Invalid JSON response: {e}", raw) from e


def check_result(result: Any) -> Any:
    """
    Return ``result`` unless it carries an ``error_response`` envelope.

    Raises:
        ApiError: If ``result`` contains the ``error_response`` key
    """
    if isinstance(result, dict) and ERROR_RESPONSE_KEY in result:
        error = ApiError(result[ERROR_RESPONSE_KEY])
        logger.warning("Gateway returned error_response: %s", error)
        raise error
    return result


class TaobaoClient:
    """
    Client for making signed requests to the Taobao Open Platform gateway.

    Holds the configuration and a pooled HTTP session; safe to share
    between threads. Use as a context manager or call close() when done.
    """

    def __init__(self, config: Config, pool_maxsize: int = POOL_MAXSIZE):
        """
        Initialize client.

        Args:
            config: Credentials and gateway settings
            pool_maxsize: Connections kept open per host
        """
        self.config = config

        self.session = requests.Session()
        self.session.headers["User-Agent"] = USER_AGENT
        # Single attempt per call; failures go straight back to the caller
        adapter = HTTPAdapter(pool_maxsize=pool_maxsize, max_retries=0)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def signed_params(
        self, params: ParameterSet, now: Optional[datetime.datetime] = None
    ) -> Dict[str, Any]:
        """Compose system parameters with ``params`` and attach the signature."""
        composed = compose(params, self.config, now)
        composed[PARAM_SIGN] = sign(composed, self.config.secret_key)
        return composed

    def query_string(self, params: ParameterSet) -> str:
        """Return the signed query string, including the leading ``?``."""
        return "?" + to_query_string(self.signed_params(params))

    def url(self, params: ParameterSet) -> str:
        """Return the full signed GET url for ``params``."""
        return f"{self.config.endpoint}{self.query_string(params)}"

    def _make_request(self, method: str, url: str, api_method: Any = None, **kwargs) -> bytes:
        """
        Send a request over the shared session and return the raw body.

        Raises:
            TransportError: If the HTTP call fails or times out
        """
        try:
            response = self.session.request(
                method, url, timeout=self.config.timeout, **kwargs
            )
        except requests.RequestException as e:
            reason = _strip_query(str(e))
            logger.warning("%s %s failed: %s", method, api_method or "request", reason)
            raise TransportError(f"HTTP request failed: {reason}") from e

        logger.debug(
            "%s %s -> HTTP %s", method, api_method or "request", response.status_code
        )
        return response.content

    def get(self, params: ParameterSet) -> Any:
        """Signed GET request; returns the decoded JSON as is."""
        body = self._make_request(
            "GET", self.url(params), api_method=params.get(PARAM_METHOD)
        )
        return parse_result(body)

    def post(self, params: ParameterSet) -> Any:
        """Signed POST request; returns the decoded JSON as is."""
        data = to_query_string(self.signed_params(params))
        body = self._make_request(
            "POST",
            self.config.endpoint,
            api_method=params.get(PARAM_METHOD),
            data=data.encode("utf-8"),
            headers={"Content-Type": FORM_CONTENT_TYPE},
        )
        return parse_result(body)

    def get_strict(self, params: ParameterSet) -> Any:
        """
        Signed GET request.

        Raises:
            ApiError: If the gateway returned an ``error_response``
        """
        return check_result(self.get(params))

    def post_strict(self, params: ParameterSet) -> Any:
        """
        Signed POST request.

        Raises:
            ApiError: If the gateway returned an ``error_response``
        """
        return check_result(self.post(params))

    def call(self, http_method: str, params: ParameterSet, strict: bool = False) -> Any:
        """
        Dispatch a signed call by HTTP method name.

        Args:
            http_method: ``GET`` or ``POST`` (case-insensitive)
            params: Business parameters
            strict: Raise ApiError on ``error_response`` instead of returning it

        Raises:
            ValueError: If ``http_method`` is neither GET nor POST
        """
        verb = http_method.upper()
        if verb == "GET":
            return self.get_strict(params) if strict else self.get(params)
        if verb == "POST":
            return self.post_strict(params) if strict else self.post(params)
        raise ValueError(f"Unsupported HTTP method: {http_method}")

    def close(self):
        """Close HTTP session."""
        if self.session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def load(config_path: Union[str, Path], environment: Optional[str] = None) -> TaobaoClient:
    """Load a YAML config file and build a client from it."""
    return TaobaoClient(load_config(config_path, environment))
