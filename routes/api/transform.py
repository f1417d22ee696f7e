# -------------------- 라우트 --------------------
from flask import Blueprint, current_app, g, jsonify

from auth.identity import caller_from_request
from core.extensions import limiter
from domain.schema import transform_schema
from security.security import require_safe_input

api_transform_bp = Blueprint("api_transform", __name__)


def _transform_limit():
    return current_app.config.get("TRANSFORM_RATE_LIMIT") or "60/minute"


# JSON API: 레이트리밋 + 스키마 검증
@api_transform_bp.route("/api/transform", methods=["POST"])
@limiter.limit(_transform_limit)
@require_safe_input(transform_schema, for_llm_fields=["originalText"])
def api_transform():
    data = g.safe_input
    caller = caller_from_request()

    result = current_app.transformer.transform(
        caller,
        original_text=data.get("originalText"),
        to_style=data.get("toStyle"),
        from_style=data.get("fromStyle"),
        preservation_percentage=data.get("preservationPercentage"),
    )
    current_app.logger.info(
        "[TRANSFORM] account=%s guest=%s record=%s",
        caller.account.id if caller.account else None, caller.guest_id, result.record.id,
    )
    return jsonify(result.to_dict()), 200
