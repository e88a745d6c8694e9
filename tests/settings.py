from environ import Env

env = Env()

PGRESTCLIENT_BASE_URL = env.str("PGRESTCLIENT_BASE_URL", default="http://postgrest.test/")
PGRESTCLIENT_TIMEOUT = env.float("PGRESTCLIENT_TIMEOUT", default=5.0)

INSTALLED_APPS = []

# Test session requirements

SECRET_KEY = "insecure-tests-only"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

TIME_ZONE = "Europe/Amsterdam"

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {"console": {"class": "logging.StreamHandler"}},
    "loggers": {
        "pgrestclient": {"handlers": ["console"], "level": env.str("LOG_LEVEL", default="WARNING")},
    },
}
