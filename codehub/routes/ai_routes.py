"""
AI generation routes for Code Hub.
Analyzes a question (image and/or text) and lists available models.
"""
import logging
from flask import Blueprint, request, jsonify

from codehub.config import config
from codehub.errors import CodeHubError
from codehub.models import ImageUpload
from codehub.services import request_builder

logger = logging.getLogger(__name__)

ai_bp = Blueprint('ai', __name__)


def _api_key():
    """Key from the request, falling back to the configured one."""
    key = request.form.get('apiKey') or request.headers.get('X-API-Key') or ''
    return key.strip() or config.api_key


def _uploaded_image():
    file = request.files.get('image')
    if file is None or file.filename == '':
        return None
    return ImageUpload.from_file_storage(file)


@ai_bp.route('/api/analyze', methods=['POST'])
def analyze():
    """Generate the correct answer, explanation and misconceptions with AI."""
    try:
        image = _uploaded_image()
        analysis = request_builder.generate_analysis(
            api_key=_api_key(),
            prompt_override=request.form.get('prompt', ''),
            image=image,
            model=request.form.get('model') or config.default_model,
            question_type=request.form.get('questionType', 'multiple-choice'),
            instructions=request.form.get('instructions', ''),
            question_text=request.form.get('questionText', ''),
        )
    except CodeHubError as e:
        return jsonify({"error": e.message}), e.status_code

    return jsonify({"analysis": analysis.to_dict()})


@ai_bp.route('/api/models')
def models():
    """List models available to the configured credential."""
    try:
        model_list = request_builder.list_models(_api_key())
    except CodeHubError as e:
        return jsonify({"error": e.message}), e.status_code

    return jsonify({"models": model_list, "default": config.default_model})


@ai_bp.route('/api/image-preview', methods=['POST'])
def image_preview():
    """Turn an uploaded question image into a data-URI preview."""
    if 'image' not in request.files:
        return jsonify({"error": "No file provided"}), 400

    try:
        image = _uploaded_image()
    except CodeHubError as e:
        return jsonify({"error": e.message}), e.status_code
    if image is None:
        return jsonify({"error": "No file selected"}), 400

    return jsonify({
        "previewUrl": image.to_data_uri(),
        "filename": image.filename,
        "mimeType": image.mime_type,
    })
