from flask import Blueprint, current_app, jsonify

api_health_bp = Blueprint("api_health", __name__)


@api_health_bp.route("/health")
def health():
    return jsonify({
        "ok": True,
        "storage": current_app.storage.name,
        "provider": current_app.rewriter.name,
    }), 200
