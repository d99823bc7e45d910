"""
Production settings for OneVote project.

Expects to run behind a reverse proxy that sets X-Forwarded-For itself;
vote deduplication keys on the resolved client IP.
"""

import copy
import json
import logging

from .base import *  # noqa: F403, F401
from .base import LOGGING as BASE_LOGGING
from .base import env

DEBUG = False

SECRET_KEY = env("SECRET_KEY")

SECURE_SSL_REDIRECT = env.bool("SECURE_SSL_REDIRECT", default=True)
SESSION_COOKIE_SECURE = env.bool("SESSION_COOKIE_SECURE", default=True)
CSRF_COOKIE_SECURE = env.bool("CSRF_COOKIE_SECURE", default=True)
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = "DENY"

# The in-memory store does not survive restarts or span workers
VOTE_STORE_BACKEND = env("VOTE_STORE_BACKEND", default="database")

# Weak or missing keys are refused at request time with a 503
ADMIN_LOG_KEY = env("ADMIN_LOG_KEY", default="")

LOG_LEVEL = env("LOG_LEVEL", default="INFO")


class JSONFormatter(logging.Formatter):
    """One JSON object per line for log shippers."""

    def format(self, record):
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


LOGGING = copy.deepcopy(BASE_LOGGING)
LOGGING["formatters"]["json"] = {"()": JSONFormatter}
if env.bool("JSON_LOGGING", default=False):
    LOGGING["handlers"]["console"]["formatter"] = "json"
LOGGING["root"]["level"] = LOG_LEVEL
LOGGING["loggers"]["django"]["level"] = LOG_LEVEL
