"""
Development settings for OneVote project.
"""

from .base import *  # noqa: F403, F401

DEBUG = True

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "0.0.0.0"]

# Single-process demo deployment keeps the ledger in memory unless told otherwise
VOTE_STORE_BACKEND = env("VOTE_STORE_BACKEND", default="memory")  # noqa: F405

# Disable security features for development
SECURE_SSL_REDIRECT = False
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

# Logging for development
LOGGING["loggers"]["django"]["level"] = "DEBUG"  # noqa: F405
