"""
Test settings for OneVote project.
"""

from .base import *  # noqa: F403, F401

SECRET_KEY = "onevote-test-secret-key"

# In-memory database; pytest-django creates tables and runs migrations
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# Password hashing for tests (faster)
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# Disable security features for tests
SECURE_SSL_REDIRECT = False
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

# Celery configuration for tests (synchronous execution)
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

# Disable logging during tests
LOGGING_CONFIG = None

# Local memory cache so throttles and reputation caching behave as in production
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "onevote-tests",
    }
}

# Poll open regardless of the configured close time
POLL_TEST_MODE = True
POLL_RESULTS_CACHE_TTL = 0

VOTE_STORE_BACKEND = "database"

# Never call the reputation service from tests
IP_REPUTATION_ENABLED = False

# Throttling tests lower these explicitly
VOTE_RATE_LIMIT = "1000/min"
GENERAL_RATE_LIMIT = "1000/min"

ADMIN_LOG_KEY = "test-admin-log-key"
