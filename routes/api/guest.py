from flask import Blueprint, current_app, jsonify

from auth.identity import remember_guest, resolve_guest, session_guest_id
from core.http_utils import _json_err, nocache

api_guest_bp = Blueprint("api_guest", __name__)


@api_guest_bp.route("/api/guest/init", methods=["GET"])
@nocache
def api_guest_init():
    """
    게스트 세션 보장 (idempotent)
    - 세션의 guest id 가 유효하면 그대로
    - 없거나 stale 이면 새로 발급 후 세션에 저장
    """
    view = resolve_guest(
        current_app.storage,
        session_guest_id(),
        max_usage=current_app.config.get("GUEST_MAX_USAGE"),
    )
    remember_guest(view.guest_id)
    return jsonify(view.to_dict()), 200


@api_guest_bp.route("/api/guest/usage", methods=["GET"])
@nocache
def api_guest_usage():
    guest_id = session_guest_id()
    if not guest_id:
        return _json_err("no_guest_session", "No guest session found", 400)
    # 레코드가 없으면 NotFound → 404
    view = current_app.ledger.usage(guest_id)
    return jsonify(view.to_dict()), 200
