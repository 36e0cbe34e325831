import logging

from flask import Blueprint, current_app, jsonify, request

from ..transport_config import TransportConfig, TransportConfigError

logger = logging.getLogger(__name__)

transport_bp = Blueprint("transport", __name__, url_prefix="/api/transport-config")

EXTENSION_KEY = "transport_config"
UPDATABLE_FIELDS = ("storage_url", "check_url", "api_key")


def has_control_characters(value):
    return any(ord(ch) < 0x20 or ord(ch) == 0x7f for ch in value)


def get_transport_config():
    """Returns the application's transport settings, loading them on first use."""
    config = current_app.extensions.get(EXTENSION_KEY)
    if config is None:
        config = TransportConfig(
            current_app.config["DATA_DIR"],
            monitoring_dir_name=current_app.config["MONITORING_DIR_NAME"],
            properties_name=current_app.config["MONITORING_PROPERTIES_NAME"],
            default_storage_url=current_app.config["MONITORING_STORAGE_URL"],
            default_check_url=current_app.config["MONITORING_CHECK_URL"],
        )
        current_app.extensions[EXTENSION_KEY] = config
    return config


@transport_bp.route("", methods=["GET"])
def read_transport_config():
    return jsonify(get_transport_config().to_dict()), 200


@transport_bp.route("", methods=["PUT"])
def update_transport_config():
    """Updates the given monitoring endpoint fields and saves them."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400

    updates = {}
    for field in UPDATABLE_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if (not isinstance(value, str) or not value.strip()
                or has_control_characters(value.strip())):
            return jsonify({"error": f"Invalid value for {field}"}), 400
        updates[field] = value.strip()

    if not updates:
        return jsonify({"error": "No updatable fields provided"}), 400

    config = get_transport_config()
    for field, value in updates.items():
        setattr(config, field, value)

    try:
        config.save()
    except TransportConfigError as e:
        # The in-memory values stay updated; the client can supply the key and retry.
        return jsonify({"error": str(e)}), 400
    except OSError as e:
        logger.error("Failed to save transport config: %s", e, exc_info=True)
        return jsonify({"error": "Failed to save transport config"}), 500

    logger.info("Updated transport config fields: %s", ", ".join(sorted(updates)))
    return jsonify(config.to_dict()), 200
