# extensions.py
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate

from domain.models import db

migrate = Migrate()

# limiter는 객체만 만들고, 실제 설정(storage/default_limits)은 app.config에서 가져오도록
limiter = Limiter(key_func=get_remote_address)

cors = CORS()


def init_extensions(app):
    # DB / migrate
    db.init_app(app)
    migrate.init_app(app, db)
    # 레이트리밋 초기화
    limiter.init_app(app)

    # CORS: /api/*만 허용 (세션 쿠키 포함)
    cors.init_app(
        app,
        supports_credentials=True,
        resources={
            r"/api/*": {
                "origins": app.config.get("CORS_ORIGINS") or [],
                "methods": ["POST", "GET"],
                "allow_headers": ["Content-Type", "Authorization", "X-Request-ID"],
            }
        },
    )
