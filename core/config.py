import os
from datetime import timedelta

from dotenv import load_dotenv

# 환경변수 로드 (.env 가 있으면)
load_dotenv()

DEV_SECRET_KEY = "dev-secret-change-me"


def _csv(v: str):
    return [x.strip() for x in (v or "").split(",") if x.strip()]


def _env_bool(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    return int(v)


class Config:
    ENV = os.getenv("FLASK_ENV", "production")

    # Flask 보안 키: development 에서만 공개 기본값 허용 (create_app 에서 검사)
    SECRET_KEY = (
        os.getenv("SESSION_SECRET")
        or os.getenv("SECRET_KEY")
        or (DEV_SECRET_KEY if ENV == "development" else None)
    )

    # -------------------------
    # Storage
    # -------------------------
    # STORAGE_BACKEND: "memory" | "database" (비어 있으면 DATABASE_URL 유무로 결정)
    DATABASE_URL = os.getenv("DATABASE_URL", "")
    USE_MEMORY_STORAGE = _env_bool("USE_MEMORY_STORAGE", False)
    STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "").strip().lower()

    # memory 백엔드여도 Flask-SQLAlchemy 확장은 초기화되므로 기본값은 sqlite in-memory
    SQLALCHEMY_DATABASE_URI = DATABASE_URL or "sqlite://"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
    }
    # database 백엔드 시작 시 테이블 생성
    AUTO_CREATE_SCHEMA = _env_bool("AUTO_CREATE_SCHEMA", True)

    # -------------------------
    # Guest quota
    # -------------------------
    GUEST_MAX_USAGE = _env_int("GUEST_MAX_USAGE", 10)
    MAX_TEXT_LENGTH = _env_int("MAX_TEXT_LENGTH", 4000)

    # -------------------------
    # 제공자(LLM)
    # -------------------------
    REWRITE_PROVIDER = os.getenv("REWRITE_PROVIDER", "gemini").strip().lower()
    VALIDATE_PROVIDER_ON_STARTUP = _env_bool("VALIDATE_PROVIDER_ON_STARTUP", True)
    PROVIDER_TIMEOUT_SECONDS = float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "30"))

    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o")
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
    CLAUDE_MODEL = os.getenv("CLAUDE_MODEL", "claude-sonnet-4-5-20250929")
    HUGGINGFACE_API_KEY = os.getenv("HUGGINGFACE_API_KEY")
    HUGGINGFACE_MODEL = os.getenv("HUGGINGFACE_MODEL", "mistralai/Mixtral-8x7B-Instruct-v0.1")
    PERPLEXITY_API_KEY = os.getenv("PERPLEXITY_API_KEY")
    PERPLEXITY_MODEL = os.getenv("PERPLEXITY_MODEL", "llama-3.1-sonar-small-128k-online")

    # -------------------------
    # Session cookie
    # -------------------------
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = ENV != "development"
    PERMANENT_SESSION_LIFETIME = timedelta(days=30)

    # -------------------------
    # CORS / 요청 크기
    # -------------------------
    CORS_ORIGINS = _csv(os.getenv("CORS_ORIGINS", "http://localhost:5000,http://127.0.0.1:5000"))
    MAX_PAYLOAD_BYTES = 256 * 1024

    # -------------------------
    # Rate limiting (Flask-Limiter 표준 키)
    # -------------------------
    REDIS_URL = os.getenv("REDIS_URL", "")
    RATELIMIT_STORAGE_URI = REDIS_URL if REDIS_URL else "memory://"
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "200 per hour")
    RATELIMIT_ENABLED = _env_bool("RATELIMIT_ENABLED", True)
    TRANSFORM_RATE_LIMIT = os.getenv("TRANSFORM_RATE_LIMIT", "60/minute")

    # -------------------------
    # Logging
    # -------------------------
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
