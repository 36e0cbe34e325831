import os
from unittest.mock import patch

from resource_server.constants import IMAGE_RESOURCE_DIR_PROPERTY
from resource_server.providers import (
    app_config_provider,
    clear_process_override,
    default_providers,
    default_value_provider,
    environment_provider,
    process_override_provider,
    set_process_override,
)


def test_process_override_provider_reads_process_overrides():
    provider = process_override_provider()
    assert provider.get(IMAGE_RESOURCE_DIR_PROPERTY) is None

    set_process_override(IMAGE_RESOURCE_DIR_PROPERTY, "/srv/images")
    assert provider.get(IMAGE_RESOURCE_DIR_PROPERTY) == "/srv/images"

    clear_process_override(IMAGE_RESOURCE_DIR_PROPERTY)
    assert provider.get(IMAGE_RESOURCE_DIR_PROPERTY) is None


def test_process_override_provider_with_explicit_mapping():
    provider = process_override_provider({IMAGE_RESOURCE_DIR_PROPERTY: "/x"})
    assert provider.source == "Process override"
    assert provider.get(IMAGE_RESOURCE_DIR_PROPERTY) == "/x"


def test_app_config_provider_without_context():
    """A missing host context yields nothing instead of failing."""
    assert app_config_provider(None).get(IMAGE_RESOURCE_DIR_PROPERTY) is None
    assert app_config_provider({}).get(IMAGE_RESOURCE_DIR_PROPERTY) is None
    config = {IMAGE_RESOURCE_DIR_PROPERTY: "/cfg"}
    assert app_config_provider(config).get(IMAGE_RESOURCE_DIR_PROPERTY) == "/cfg"


def test_environment_provider_reads_os_environ():
    provider = environment_provider()
    with patch.dict(os.environ, {IMAGE_RESOURCE_DIR_PROPERTY: "/env"}):
        assert provider.get(IMAGE_RESOURCE_DIR_PROPERTY) == "/env"
    with patch.dict(os.environ, {}, clear=True):
        assert provider.get(IMAGE_RESOURCE_DIR_PROPERTY) is None


def test_default_value_provider_appends_images(tmp_path):
    provider = default_value_provider(str(tmp_path))
    assert provider.get(IMAGE_RESOURCE_DIR_PROPERTY) == os.path.join(
        str(tmp_path), "images")
    # The computed default ignores the key.
    assert provider.get("ANYTHING") == os.path.join(str(tmp_path), "images")
    assert default_value_provider(None).get(IMAGE_RESOURCE_DIR_PROPERTY) is None


def test_default_providers_order():
    sources = [p.source for p in default_providers()]
    assert sources == [
        "Process override",
        "Application config parameter",
        "Environment variable",
        "Default value for",
    ]
