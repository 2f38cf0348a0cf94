import os

from .settings import *  # noqa: F401,F403

# Ranking tests need PostgreSQL and are skipped on SQLite. Run them with
#   TEST_DB_ENGINE=postgresql pytest
# (or set TEST_DB_ENGINE in .env) and the DB_* variables pointing at a server
# where the test database can be created.
if os.environ.get("TEST_DB_ENGINE", "").lower() != "postgresql":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": ":memory:",
        }
    }

SEARCH_STATEMENT_TIMEOUT_MS = 0

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "loggers": {"search_engine": {"level": "CRITICAL"}},
}
