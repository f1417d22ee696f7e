from flask import Blueprint, current_app, g, jsonify

from auth.identity import get_current_account, login_account, logout_account
from core.http_utils import _json_err
from domain.schema import login_schema, register_schema
from security.security import require_safe_input
from services.accounts import authenticate, register_account

api_auth_bp = Blueprint("api_auth", __name__)


@api_auth_bp.route("/api/register", methods=["POST"])
@require_safe_input(register_schema)
def api_register():
    data = g.safe_input
    # 중복 username → DuplicateUsername(400)
    account = register_account(current_app.storage, data["username"], data["password"])
    login_account(account)
    return jsonify(account.public_dict()), 201


@api_auth_bp.route("/api/login", methods=["POST"])
@require_safe_input(login_schema)
def api_login():
    data = g.safe_input
    account = authenticate(current_app.storage, data["username"], data["password"])
    if account is None:
        return _json_err("invalid_credentials", "Invalid username or password", 401)
    login_account(account)
    return jsonify(account.public_dict()), 200


@api_auth_bp.route("/api/logout", methods=["POST"])
def api_logout():
    logout_account()
    return "", 200


@api_auth_bp.route("/api/user", methods=["GET"])
def api_user():
    account = get_current_account()
    if not account:
        return _json_err("auth_required", "Not authenticated", 401)
    return jsonify(account.public_dict()), 200
