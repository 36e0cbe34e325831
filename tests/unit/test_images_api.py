import os

from werkzeug.http import http_date

from resource_server.app import create_app
from resource_server.constants import IMAGE_RESOURCE_DIR_PROPERTY
from resource_server.providers import set_process_override


def test_get_image_returns_bytes_and_headers(client, image_root):
    response = client.get("/images/logo.png")

    assert response.status_code == 200
    with open(image_root / "logo.png", "rb") as f:
        expected = f.read()
    assert response.data == expected
    assert response.headers["Content-Type"] == "image/png"
    assert response.headers["Content-Length"] == str(len(expected))
    assert response.headers["Cache-Control"] == "max-age=86400"

    mtime_ms = os.stat(image_root / "logo.png").st_mtime_ns // 1_000_000
    assert response.headers["ETag"] == f'"{mtime_ms}"'
    assert response.headers["Last-Modified"] == http_date(mtime_ms // 1000)


def test_nested_path_uses_last_segment(client):
    response = client.get("/images/some/deep/dir/pixel.gif")
    assert response.status_code == 200
    assert response.headers["Content-Type"] == "image/gif"


def test_missing_image_is_json_404(client):
    response = client.get("/images/nope.png")
    assert response.status_code == 404
    assert response.get_json() == {"error": "Resource not found"}
    assert "ETag" not in response.headers
    assert response.headers.get("Cache-Control") != "max-age=86400"


def test_head_request_keeps_headers(client):
    response = client.head("/images/pixel.gif")
    assert response.status_code == 200
    assert response.data == b""
    assert response.headers["Content-Length"] == "42"


def test_configured_cache_control_is_not_overridden(data_dir, image_root):
    app = create_app({"DATA_DIR": str(data_dir),
                      "IMAGE_RESOURCE_CACHE_CONTROL": "public, max-age=60"})
    with app.test_client() as client:
        response = client.get("/images/pixel.gif")
    assert response.headers["Cache-Control"] == "public, max-age=60"


def test_unresolved_root_returns_404(tmp_path):
    app = create_app({"DATA_DIR": str(tmp_path / "missing")})
    with app.test_client() as client:
        assert client.get("/images/pixel.gif").status_code == 404
        status = client.get("/api/images/status").get_json()
    assert status == {"enabled": False, "path": None, "source": None}


def test_process_override_wins(data_dir, image_root, tmp_path):
    override_dir = tmp_path / "override"
    override_dir.mkdir()
    (override_dir / "pixel.gif").write_bytes(b"GIF89a-override")
    set_process_override(IMAGE_RESOURCE_DIR_PROPERTY, str(override_dir))

    app = create_app({"DATA_DIR": str(data_dir),
                      IMAGE_RESOURCE_DIR_PROPERTY: str(image_root)})
    with app.test_client() as client:
        response = client.get("/images/pixel.gif")
        status = client.get("/api/images/status").get_json()

    assert response.data == b"GIF89a-override"
    assert status == {"enabled": True, "path": str(override_dir),
                      "source": "Process override"}


def test_status_reports_default_directory(client, image_root):
    status = client.get("/api/images/status").get_json()
    assert status["enabled"] is True
    assert status["path"] == str(image_root)
    assert status["source"] == "Default value for"
