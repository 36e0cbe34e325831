"""Configuration providers consulted when locating the image resource directory.

A provider is a ``(source, get)`` pair: ``source`` labels where a value came
from and ``get(key)`` returns the configured string or ``None``. The resolver
queries providers in list order.
"""

import logging
import os
from collections import namedtuple

from .constants import DEFAULT_IMAGE_SUBDIR

logger = logging.getLogger(__name__)

Provider = namedtuple("Provider", ["source", "get"])

# Process-wide overrides, the highest priority source.
_process_overrides = {}


def set_process_override(key, value):
    """Sets a process-wide configuration override for ``key``."""
    _process_overrides[key] = value
    logger.debug("Process override %s set to %s", key, value)


def clear_process_override(key):
    """Removes a process-wide override, if any."""
    _process_overrides.pop(key, None)


def process_override_provider(overrides=None):
    values = _process_overrides if overrides is None else overrides
    return Provider("Process override", values.get)


def app_config_provider(config):
    """Reads values from the hosting Flask application's config.

    Args:
        config: A mapping such as ``app.config``, or None when there is no
            host context.
    """

    def get(key):
        if config is None:
            return None
        return config.get(key)

    return Provider("Application config parameter", get)


def environment_provider(environ=None):
    def get(key):
        env = os.environ if environ is None else environ
        return env.get(key)

    return Provider("Environment variable", get)


def default_value_provider(base_dir):
    """Computes ``<base_dir>/images`` regardless of the requested key.

    Args:
        base_dir (str): The application-wide base directory, or None when it
            is not known. The key is ignored.
    """

    def get(key):
        if base_dir is None:
            return None
        return os.path.join(os.path.abspath(base_dir), DEFAULT_IMAGE_SUBDIR)

    return Provider("Default value for", get)


def default_providers(config=None, base_dir=None, overrides=None, environ=None):
    """Returns the providers in priority order.

    Process overrides beat the host application's config, which beats the
    environment, which beats the computed default.
    """
    return [
        process_override_provider(overrides),
        app_config_provider(config),
        environment_provider(environ),
        default_value_provider(base_dir),
    ]
