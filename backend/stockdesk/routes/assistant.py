# Overview: Flask API route for the AI assistant; forwards questions to the relay.

from flask import Blueprint, request, jsonify

from ..services import assistant_service
from ..services.assistant_service import AssistantError


assistant_bp = Blueprint("assistant", __name__, url_prefix="/api/assistant")


@assistant_bp.post("")
def ask_route():
    """
    Body: {"userInput": "Which products should I restock?"}
    Returns {"text": ...} or {"error": ...}.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400
    try:
        text = assistant_service.ask_assistant(data.get("userInput", ""))
    except AssistantError as e:
        return jsonify({"error": str(e)}), e.status_code
    return jsonify({"text": text}), 200
