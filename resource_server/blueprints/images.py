from flask import Blueprint, abort, current_app, jsonify

from ..constants import HTTP_HEADER_CACHE_CONTROL
from ..resolver import get_resolved_root
from ..resource_service import serve_resource
from ..sinks import BufferedSink

images_bp = Blueprint("images", __name__)


@images_bp.route("/images/<path:filename>", methods=["GET"])
def get_image(filename):
    """Serves a file from the image resource directory.

    Only the last segment of ``filename`` is used. Any failure is reported
    through the application's 404 handler.
    """
    sink = BufferedSink()
    cache_control = current_app.config.get("IMAGE_RESOURCE_CACHE_CONTROL")
    if cache_control:
        sink.headers[HTTP_HEADER_CACHE_CONTROL] = cache_control

    root = get_resolved_root(current_app)
    if not serve_resource(root, filename, sink):
        abort(404)
    return sink.to_response()


@images_bp.route("/api/images/status", methods=["GET"])
def image_status():
    """Reports whether image serving is enabled and which directory backs it."""
    root = get_resolved_root(current_app)
    if root is None:
        return jsonify({"enabled": False, "path": None, "source": None}), 200
    return jsonify({"enabled": True, "path": root.path, "source": root.source}), 200
