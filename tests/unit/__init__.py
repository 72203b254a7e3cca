"""Unit tests."""

from configuration import configuration  # noqa: F401

config_dict = {
    "name": "test",
    "service": {
        "host": "localhost",
        "port": 8080,
        "workers": 1,
        "color_log": True,
        "access_log": True,
    },
    "upstream": {
        "url": "http://upstream.test:1234/v1/chat/completions",
        "api_key": "test-key",
        "model": "gpt-4o-mini",
    },
    "quota": {
        "anonymous_requests_per_day": 10,
        "plans": {"FREE": 25, "PLUS": 200, "PRO": 1000},
        "default_plan": "FREE",
    },
    "user_store": {
        "type": "memory",
    },
    "authentication": {
        "module": "noop",
    },
}

# NOTE: Configuration must be initialized before importing the app,
# since app.main reads service configuration during import time
configuration.init_from_dict(config_dict)
