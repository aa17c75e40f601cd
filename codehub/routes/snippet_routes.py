"""
Form and snippet routes for Code Hub.
Applies form edits and renders the Computational Layer snippets.
"""
from flask import Blueprint, request, jsonify

from codehub.errors import CodeHubError
from codehub.models import ProblemAnalysis
from codehub.services.form_state import FormState, apply_edit, apply_analysis
from codehub.services.snippet_templates import render_snippets, copy_text

snippet_bp = Blueprint('snippets', __name__)


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


@snippet_bp.route('/api/form/edit', methods=['POST'])
def edit_form():
    """Apply one edit to the posted form state."""
    data = _json_body()
    if data is None or not data.get('action'):
        return jsonify({"error": "action is required"}), 400

    try:
        state = FormState.from_dict(data.get('state'))
        state = apply_edit(state, data['action'], data.get('args'))
    except CodeHubError as e:
        return jsonify({"error": e.message}), e.status_code

    return jsonify({"state": state.to_dict()})


@snippet_bp.route('/api/form/apply-analysis', methods=['POST'])
def apply_analysis_to_form():
    """Merge an AI analysis into the posted form state."""
    data = _json_body()
    if data is None or not isinstance(data.get('analysis'), dict):
        return jsonify({"error": "analysis is required"}), 400

    try:
        state = FormState.from_dict(data.get('state'))
        analysis = ProblemAnalysis.from_dict(data['analysis'])
    except CodeHubError as e:
        return jsonify({"error": e.message}), e.status_code

    return jsonify({"state": apply_analysis(state, analysis).to_dict()})


@snippet_bp.route('/api/snippets', methods=['POST'])
def snippets():
    """Render every snippet for the posted form state."""
    data = _json_body()
    if data is None:
        return jsonify({"error": "No data provided"}), 400

    try:
        state = FormState.from_dict(data.get('state'))
    except CodeHubError as e:
        return jsonify({"error": e.message}), e.status_code

    rendered = render_snippets(state)
    return jsonify({
        "snippets": rendered,
        "copyText": {key: copy_text(key, snippet) for key, snippet in rendered.items()},
    })
