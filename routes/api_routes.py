"""Service-level API routes."""

from flask import Blueprint, jsonify

from services.db import get_store
from services.generation_service import get_generation_service

api_bp = Blueprint('api', __name__, url_prefix='/api')


@api_bp.route('/health', methods=['GET'])
def health():
    """Health check endpoint."""
    return jsonify({"ok": True, "store": get_store().name})


@api_bp.route('/llm/status', methods=['GET'])
def llm_status():
    """Whether topic extraction and quiz generation can reach the LLM."""
    return jsonify(get_generation_service().status())
