from .auth import auth_bp
from .templates import templates_bp
from .documents import documents_bp
from .preview import preview_bp
from .admin import admin_bp
from .errors import register_error_handlers


def register_blueprints(app):
    app.register_blueprint(auth_bp)
    app.register_blueprint(templates_bp)
    app.register_blueprint(documents_bp)
    app.register_blueprint(preview_bp)
    app.register_blueprint(admin_bp)
    register_error_handlers(app)
