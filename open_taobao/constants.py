"""
Constants for the Taobao Open Platform client.
"""

VERSION = "1.0.0"

# Gateway protocol
API_VERSION = "2.0"
RESPONSE_FORMAT = "json"
SIGN_METHOD = "md5"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Parameter names
PARAM_TIMESTAMP = "timestamp"
PARAM_VERSION = "v"
PARAM_FORMAT = "format"
PARAM_SIGN_METHOD = "sign_method"
PARAM_APP_KEY = "app_key"
PARAM_SIGN = "sign"
PARAM_METHOD = "method"

# Key of the error envelope in gateway responses
ERROR_RESPONSE_KEY = "error_response"

# HTTP
REQUEST_TIMEOUT = 10        # seconds
POOL_MAXSIZE = 10           # connections kept per host
USER_AGENT = f"open_taobao-v{VERSION}"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded;charset=utf-8"

# Configuration
REQUIRED_CONFIG_KEYS = ("app_key", "secret_key", "endpoint")
ENV_SELECTOR = "OPEN_TAOBAO_ENV"

# Environment variables written by export_to_env()
ENV_API_KEY = "TAOBAO_API_KEY"
ENV_SECRET_KEY = "TAOBAO_SECRET_KEY"
ENV_ENDPOINT = "TAOBAO_ENDPOINT"
ENV_PID = "TAOBAOKE_PID"
