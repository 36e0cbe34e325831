import logging
import os
from dataclasses import dataclass

from .constants import IMAGE_RESOURCE_DIR_PROPERTY
from .providers import default_providers

logger = logging.getLogger(__name__)

EXTENSION_KEY = "image_resources"


@dataclass(frozen=True)
class ResolvedRoot:
    """An image resource directory together with the provider that supplied it."""

    path: str
    source: str


def _validation_failure(path):
    if not os.path.exists(path):
        return "but this path does not exist"
    if not os.path.isdir(path):
        return "which is not a directory"
    if not os.access(path, os.W_OK):
        return "which is not writeable"
    return None


def resolve_root(providers, key=IMAGE_RESOURCE_DIR_PROPERTY):
    """Picks the image resource directory from an ordered provider list.

    The first provider whose value names an existing, writable directory wins;
    providers after it are not queried.

    Args:
        providers (list[Provider]): Providers in priority order.
        key (str): The configuration key to look up.

    Returns:
        ResolvedRoot | None: The selected directory, or None if no provider
        yields a valid one. Serving is disabled in that case.
    """
    for provider in providers:
        path = provider.get(key)
        if path is None:
            logger.debug("%s %s is not set", provider.source, key)
            continue

        message = f"{provider.source} {key} set to {path}"
        failure = _validation_failure(path)
        if failure:
            logger.warning("%s, %s", message, failure)
            continue

        logger.info(message)
        return ResolvedRoot(path=os.path.abspath(path), source=provider.source)

    logger.warning("No valid %s found, image resource serving is disabled", key)
    return None


def get_resolved_root(app):
    """Returns the application's resolved root, resolving it on first use.

    The result (including an absent root) is kept in ``app.extensions`` for
    the lifetime of the process.
    """
    if EXTENSION_KEY not in app.extensions:
        providers = default_providers(
            config=app.config,
            base_dir=app.config.get("DATA_DIR") or app.instance_path,
        )
        app.extensions[EXTENSION_KEY] = resolve_root(providers)
    return app.extensions[EXTENSION_KEY]


def reset_resolved_root(app):
    """Forgets the cached root so the next request resolves it again."""
    app.extensions.pop(EXTENSION_KEY, None)
