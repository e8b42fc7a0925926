"""Settings used by the test suite: in-memory SQLite, fast hashing, quiet logs."""

from .settings import *  # noqa: F401,F403
from .settings import LOGGING

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

REDIS_URL = "redis://localhost:6379/15"

for _logger in LOGGING["loggers"].values():
    _logger["level"] = "CRITICAL"
