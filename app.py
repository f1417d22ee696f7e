import click
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

import routes
from auth.quota import UsageLedger
from core.config import DEV_SECRET_KEY, Config
from core.extensions import init_extensions
from core.hooks import register_hooks
from core.logging_config import configure_logging
from domain.errors import TextStylerError
from domain.schema import MAX_TEXT_LENGTH
from security.headers import init_security_headers
from services.ai.router import create_rewriter
from services.transform import TransformOrchestrator
from storage import create_storage


def _check_secret_key(app):
    """세션 서명 키: 없거나, development 밖에서 공개 기본값이면 시작 거부"""
    secret = app.config.get("SECRET_KEY")
    if not secret:
        raise RuntimeError("SECURITY: SESSION_SECRET (또는 SECRET_KEY) 를 설정하세요.")
    if secret == DEV_SECRET_KEY and app.config.get("ENV") != "development":
        raise RuntimeError("SECURITY: 기본 SECRET_KEY 는 development 에서만 쓸 수 있습니다.")


def _register_error_handlers(app):
    @app.errorhandler(TextStylerError)
    def _handle_app_error(err: TextStylerError):
        if err.http_status >= 500:
            app.logger.error("[%s] %s", err.code, err.message)
        resp = jsonify(err.to_dict())
        resp.status_code = err.http_status
        return resp

    @app.errorhandler(HTTPException)
    def _handle_http_error(err: HTTPException):
        resp = jsonify({"error": (err.name or "error").lower().replace(" ", "_"), "message": err.description})
        resp.status_code = err.code or 500
        return resp


def _register_cli(app):
    @app.cli.command("check-provider")
    def check_provider():
        """설정된 rewrite provider 의 키를 검증"""
        ok = app.rewriter.validate_credentials()
        click.echo(f"{app.rewriter.name}: {'ok' if ok else 'FAILED'}")
        if not ok:
            raise SystemExit(1)

    @app.cli.command("init-db")
    def init_db():
        """database 백엔드 테이블 생성"""
        app.storage.init_schema()
        click.echo(f"schema ready ({app.storage.name})")


def create_app(config_object=None, rewriter=None, **overrides):
    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    # 테스트 등에서 개별 키 덮어쓰기
    app.config.update(overrides)

    configure_logging(app)
    init_extensions(app)

    _check_secret_key(app)
    app.secret_key = app.config["SECRET_KEY"]

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)

    # 시작 시 한 번만 결정되는 의존성들
    app.storage = create_storage(app.config)
    if app.storage.name == "database" and app.config.get("AUTO_CREATE_SCHEMA"):
        with app.app_context():
            app.storage.init_schema()

    app.ledger = UsageLedger(app.storage)
    app.rewriter = rewriter or create_rewriter(app.config)
    if app.config.get("VALIDATE_PROVIDER_ON_STARTUP"):
        if not app.rewriter.validate_credentials():
            app.logger.warning("[STARTUP] %s credentials could not be validated", app.rewriter.name)
    app.transformer = TransformOrchestrator(
        app.storage, app.ledger, app.rewriter,
        max_text_length=app.config.get("MAX_TEXT_LENGTH") or MAX_TEXT_LENGTH,
    )

    init_security_headers(app)
    routes.register_routes(app)
    register_hooks(app)
    _register_error_handlers(app)
    _register_cli(app)

    app.logger.info("[STARTUP] storage=%s provider=%s", app.storage.name, app.rewriter.name)
    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000)
