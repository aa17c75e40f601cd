"""
Settings-related API routes for Code Hub.
Handles the LLM credential and default model. Held in memory only.
"""
import logging
from flask import Blueprint, request, jsonify

from codehub.config import config

logger = logging.getLogger(__name__)

settings_bp = Blueprint('settings', __name__)

EDITABLE_SETTINGS = ('api_key', 'default_model')


@settings_bp.route('/api/status')
def status():
    """Health check used by the UI before enabling AI generation."""
    return jsonify({"status": "ok", "has_api_key": bool(config.api_key)})


@settings_bp.route('/api/settings')
def load_settings():
    """Return current settings with the API key masked."""
    return jsonify({"settings": config.to_dict()})


@settings_bp.route('/api/settings', methods=['POST'])
def save_settings():
    """Update the API key and/or default model for this server process."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "No data provided"}), 400

    updates = {}
    for key in EDITABLE_SETTINGS:
        if key in data:
            value = data[key]
            if not isinstance(value, str):
                return jsonify({"error": f"{key} must be a string"}), 400
            updates[key] = value.strip()

    if updates.get('default_model') == "":
        return jsonify({"error": "default_model cannot be empty"}), 400

    config.update(updates)
    logger.info("Settings updated: %s", ", ".join(sorted(updates)) or "nothing")
    return jsonify({"status": "saved", "settings": config.to_dict()})
