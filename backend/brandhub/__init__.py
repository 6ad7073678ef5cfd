# backend/brandhub/__init__.py
from flask import Flask, current_app, request

from .config import Config
from .errors import BrandHubError
from .extensions import db, migrate


def create_app(test_config=None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    # Overrides must land before extensions read the config
    if test_config:
        app.config.update(test_config)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.public import public_bp
    from .routes.auth import auth_bp
    from .routes.profiles import profiles_bp
    from .routes.brands import brands_bp
    from .routes.products import products_bp
    from .routes.files import files_bp
    from .routes.landing_pages import landing_pages_bp
    from .routes.qr_codes import qr_codes_bp
    from .routes.admin import admin_bp

    app.register_blueprint(public_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(profiles_bp)
    app.register_blueprint(brands_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(files_bp)
    app.register_blueprint(landing_pages_bp)
    app.register_blueprint(qr_codes_bp)
    app.register_blueprint(admin_bp)

    @app.errorhandler(BrandHubError)
    def handle_brandhub_error(e: BrandHubError):
        if e.status_code >= 500:
            current_app.logger.exception("Store failure on %s %s", request.method, request.path)
        return e.to_dict(), e.status_code

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ALLOWED_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
