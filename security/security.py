"""
security.py: 입력 검증 및 프롬프트 인젝션 의심 입력 로깅 유틸
"""

import logging
import re
from functools import wraps

from flask import g, request
from jsonschema import ValidationError, validate

from domain.errors import InvalidInput

logger = logging.getLogger(__name__)

# 제어문자(탭/개행 제외)
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

# 일반 문장에도 나오는 표현이라 거부하지 않고 로그만 남김
SUSPICIOUS_PATTERNS = (
    "ignore previous instructions",
    "ignore all previous instructions",
    "disregard the above",
    "reveal your system prompt",
    "jailbreak",
)


def suspicious_phrases(text):
    lower = (text or "").lower()
    return [pat for pat in SUSPICIOUS_PATTERNS if pat in lower]


def _sanitize_payload(value, for_llm=False):
    """
    문자열/리스트/딕셔너리를 재귀적으로 정화 (제어문자 제거).
    for_llm=True: 인젝션 의심 표현이 있으면 warning 로그 (요청은 그대로 통과).
    """
    if isinstance(value, str):
        cleaned = _CONTROL_RE.sub("", value)
        if for_llm:
            hits = suspicious_phrases(cleaned)
            if hits:
                logger.warning("possible prompt injection in LLM field: %s", hits)
        return cleaned

    if isinstance(value, list):
        return [_sanitize_payload(v, for_llm=for_llm) for v in value]

    if isinstance(value, dict):
        return {k: _sanitize_payload(v, for_llm=for_llm) for k, v in value.items()}

    return value


def _apply_defaults(data, schema):
    for key, prop in (schema or {}).get("properties", {}).items():
        if "default" in prop and data.get(key) is None:
            data[key] = prop["default"]
    return data


def _validate_schema(data, schema):
    """JSON Schema 검증 (필수 필드, 타입 등)"""
    if not schema:
        return
    try:
        validate(instance=data, schema=schema)
    except ValidationError as e:
        field = ".".join(str(p) for p in e.absolute_path) or None
        raise InvalidInput("Invalid input data", errors=[{"field": field, "message": e.message}])


# -------------------- 메인 데코레이터 --------------------
def require_safe_input(json_schema=None, *, for_llm_fields=None):
    """
    JSON 본문 검증 데코레이터
      - json_schema : JSON 스키마(dict), default 값은 검증 전에 채워진다
      - for_llm_fields : LLM 에 그대로 전달되는 필드 (인젝션 의심 표현은 로그만)
    검증된 본문은 g.safe_input 에 저장
    """
    for_llm_fields = set(for_llm_fields or [])

    def deco(f):
        @wraps(f)
        def wrapped(*args, **kwargs):
            payload = request.get_json(silent=True)
            if not isinstance(payload, dict):
                raise InvalidInput("A JSON object body is required")

            safe = {k: _sanitize_payload(v, for_llm=(k in for_llm_fields)) for k, v in payload.items()}
            _apply_defaults(safe, json_schema)
            _validate_schema(safe, json_schema)

            g.safe_input = safe
            return f(*args, **kwargs)
        return wrapped
    return deco
