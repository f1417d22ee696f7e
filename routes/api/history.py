from flask import Blueprint, current_app, jsonify

from auth.identity import caller_from_request
from core.http_utils import _json_err, nocache

api_history_bp = Blueprint("api_history", __name__)


@api_history_bp.route("/api/transformations", methods=["GET"])
@nocache
def api_transformations():
    caller = caller_from_request()
    if not caller.is_authenticated:
        return _json_err("auth_required", "User must be authenticated", 401)
    rows = current_app.transformer.history(caller)
    return jsonify([r.to_dict() for r in rows]), 200
