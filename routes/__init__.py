# routes/__init__.py
from .api.auth import api_auth_bp
from .api.guest import api_guest_bp
from .api.health import api_health_bp
from .api.history import api_history_bp
from .api.transform import api_transform_bp


def register_routes(app):
    app.register_blueprint(api_health_bp)
    app.register_blueprint(api_auth_bp)
    app.register_blueprint(api_guest_bp)
    app.register_blueprint(api_transform_bp)
    app.register_blueprint(api_history_bp)
