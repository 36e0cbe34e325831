import os

import pytest

os.environ["TESTING"] = "true"

from resource_server.app import create_app  # noqa: E402
from resource_server.constants import IMAGE_RESOURCE_DIR_PROPERTY  # noqa: E402
from resource_server.providers import clear_process_override  # noqa: E402

from .utils import unpack  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_image_dir_config(monkeypatch):
    """Keep the developer's environment and process overrides out of the tests."""
    monkeypatch.delenv(IMAGE_RESOURCE_DIR_PROPERTY, raising=False)
    monkeypatch.delenv("FLASK_" + IMAGE_RESOURCE_DIR_PROPERTY, raising=False)
    clear_process_override(IMAGE_RESOURCE_DIR_PROPERTY)
    yield
    clear_process_override(IMAGE_RESOURCE_DIR_PROPERTY)


@pytest.fixture
def data_dir(tmp_path):
    """Return an application data directory with an images/ subdirectory."""
    images = tmp_path / "data" / "images"
    images.mkdir(parents=True)
    return tmp_path / "data"


@pytest.fixture
def image_root(data_dir):
    """Return the default image directory populated from test-data/images.zip."""
    return unpack("images.zip", data_dir / "images")


@pytest.fixture
def app(data_dir):
    app = create_app({"TESTING": True, "DATA_DIR": str(data_dir)})
    yield app


@pytest.fixture
def client(app, image_root):
    """Provides a test client backed by the populated default image directory."""
    with app.test_client() as test_client:
        yield test_client
