from django.conf import settings
from django.core.signals import setting_changed
from django.dispatch import receiver

_originals = {}

# -- server

# The base URL of the PostgREST server, e.g. "https://example.com/api/".
# This can be a path only when the transport has a base URL of its own.
PGRESTCLIENT_BASE_URL = getattr(settings, "PGRESTCLIENT_BASE_URL", "/")

# Timeout (in seconds) for the default httpx transport.
PGRESTCLIENT_TIMEOUT = getattr(settings, "PGRESTCLIENT_TIMEOUT", 30.0)

# -- query strings

# Whether query strings are percent-encoded.
# Disabling this makes the URLs readable for debugging.
PGRESTCLIENT_ENCODE_QUERY_STRINGS = getattr(settings, "PGRESTCLIENT_ENCODE_QUERY_STRINGS", True)

# The page size used by Query.page() when none is given.
PGRESTCLIENT_DEFAULT_PAGE_SIZE = getattr(settings, "PGRESTCLIENT_DEFAULT_PAGE_SIZE", 10)

# -- responses

# Whether the shape of embedded resources in the response is checked against the query.
PGRESTCLIENT_VALIDATE_CARDINALITY = getattr(settings, "PGRESTCLIENT_VALIDATE_CARDINALITY", True)


SETTINGS_PREFIX = "PGRESTCLIENT_"


@receiver(setting_changed)
def _on_settings_change(setting, value, enter, **kwargs):
    """Keep the module constants in sync with override_settings()."""
    if not setting.startswith(SETTINGS_PREFIX) or setting not in globals():
        return

    if enter:
        # Remember the value of this module, as the settings may not define it.
        _originals.setdefault(setting, globals()[setting])
    elif value is None:
        # Leaving override_settings() gives the value of the settings module,
        # which is None when it was only defined here.
        value = _originals.get(setting)

    globals()[setting] = value
