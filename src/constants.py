"""Constants used in business logic."""

# Environment variable used to pass configuration file path to uvicorn workers
CONFIG_PATH_ENV_VAR = "CHAT_RELAY_CONFIG_PATH"
DEFAULT_CONFIG_PATH = "chat-relay.yaml"

# Upstream (OpenAI-compatible) completion endpoint defaults
DEFAULT_UPSTREAM_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_UPSTREAM_MODEL = "gpt-4o-mini"
DEFAULT_UPSTREAM_API_KEY_ENV = "OPENAI_API_KEY"
# model-imposed generation cap
DEFAULT_MAX_OUTPUT_TOKENS = 1200
DEFAULT_UPSTREAM_CONNECT_TIMEOUT = 10.0
DEFAULT_UPSTREAM_READ_TIMEOUT = 60.0

# Maximal length of raw upstream error detail relayed to the caller
MAX_ERROR_DETAILS_LENGTH = 1500

# Pattern used to recognize rate-limit shaped upstream errors
UPSTREAM_RATE_LIMIT_PATTERN = r"rate limit|tpm|too many requests"

# Error codes reported to the caller
ERROR_CODE_VALIDATION = "VALIDATION"
ERROR_CODE_AUTH = "AUTH"
ERROR_CODE_APP_LIMIT = "APP_LIMIT"
ERROR_CODE_RATE_LIMIT = "RATE_LIMIT"
ERROR_CODE_OPENAI_ERROR = "OPENAI_ERROR"
ERROR_CODE_SERVER = "SERVER"

# Retry-after values (in seconds) reported together with 429 responses.
# The local quota value is fixed and does not reflect the actual time
# remaining to local midnight.
APP_LIMIT_RETRY_AFTER = 86400
RATE_LIMIT_RETRY_AFTER = 60

# Plan tiers and daily request limits
PLAN_FREE = "FREE"
PLAN_PLUS = "PLUS"
PLAN_PRO = "PRO"
DEFAULT_PLAN = PLAN_FREE
DEFAULT_PLAN_LIMITS = {
    PLAN_FREE: 25,
    PLAN_PLUS: 200,
    PLAN_PRO: 1000,
}
DEFAULT_ANONYMOUS_REQUESTS_PER_DAY = 10
ANONYMOUS_ORIGIN_UNKNOWN = "unknown"

# Relay actions, both share the same admission policy
ACTION_CHAT = "chat"
ACTION_CHAT_STREAM = "chat/stream"

# Upstream event stream framing
STREAM_DATA_PREFIX = "data:"
STREAM_TERMINAL_TOKEN = "[DONE]"

# Caller-facing event stream
MEDIA_TYPE_EVENT_STREAM = "text/event-stream"
STREAM_EVENT_STATUS = "status"
STREAM_EVENT_TOKEN = "token"
STREAM_EVENT_DONE = "done"
STREAM_EVENT_ERROR = "error"
STREAM_STATUS_CONNECTED = "connected"
STREAM_DONE_PAYLOAD = "1"

# Authentication constants
AUTH_MOD_NOOP = "noop"
AUTH_MOD_JWT_COOKIE = "jwt-cookie"
# Supported authentication modules
SUPPORTED_AUTHENTICATION_MODULES = frozenset(
    {
        AUTH_MOD_NOOP,
        AUTH_MOD_JWT_COOKIE,
    }
)
DEFAULT_AUTHENTICATION_MODULE = AUTH_MOD_NOOP
DEFAULT_SESSION_COOKIE_NAME = "session_token"
DEFAULT_JWT_UID_CLAIM = "user_id"
DEFAULT_JWT_ALGORITHM = "HS256"

# PostgreSQL connection constants
# See: https://www.postgresql.org/docs/current/libpq-connect.html#LIBPQ-CONNECT-SSLMODE
POSTGRES_DEFAULT_SSL_MODE = "prefer"
# See: https://www.postgresql.org/docs/current/libpq-connect.html#LIBPQ-CONNECT-GSSENCMODE
POSTGRES_DEFAULT_GSS_ENCMODE = "prefer"

# user store constants
USER_STORE_TYPE_MEMORY = "memory"
USER_STORE_TYPE_SQLITE = "sqlite"
USER_STORE_TYPE_POSTGRES = "postgres"

# Messages reported when daily quota is exhausted
ANONYMOUS_LIMIT_MESSAGE = (
    "You have reached the guest limit for today. "
    "Register to get more requests."
)
PLAN_LIMIT_MESSAGE = (
    "You have reached the daily request limit of your plan. "
    "Try again tomorrow or upgrade your plan."
)

# Messages reported for upstream failures
UPSTREAM_RATE_LIMIT_MESSAGE = (
    "Upstream rate limit reached. Wait 60 seconds and try again."
)
UPSTREAM_ERROR_MESSAGE = "Upstream model error. Try again later."
STREAM_ERROR_MESSAGE = "Stream error."
