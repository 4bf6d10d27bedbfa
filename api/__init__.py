from flask import Flask
from flasgger import Swagger
from flask_cors import CORS
import logging
from logging.handlers import RotatingFileHandler

from .config import DEV_JWT_SECRET, ProductionConfig, get_config
from .errors import register_error_handlers
import services

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0.0",
    "info": {
        "title": "Vinyl Collection Auth API",
        "version": "1.0.0",
        "description": "Session tokens, account security, email verification, password reset and Discogs account linking.",
    },
    "basePath": "/",  # Blueprints are mounted under /api/v1
    "schemes": ["http"],
    "securityDefinitions": {
        "SessionCookie": {
            "type": "apiKey",
            "name": "Cookie",
            "in": "header",
            "description": "Session cookie set by /api/v1/auth/login, e.g. \"token=<jwt>\".",
        }
    },
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}

# Endpoints reachable without a session; everything else sits behind session_required
PUBLIC_ENDPOINTS = {
    "root",
    "health.health",
    "auth.signup",
    "auth.login",
    "auth.logout",
    "auth.refresh",
    "auth.forgot_password",
    "auth.reset_password",
    "auth.verify_email",
    "auth.verify_email_link",
    "discogs.callback",
}


def configure_logging(app: Flask) -> None:
    level = getattr(logging, app.config.get("LOG_LEVEL", "INFO"), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.logger.setLevel(level)
    log_file = app.config.get("LOG_FILE")
    if log_file:
        file_handler = RotatingFileHandler(log_file, maxBytes=10240, backupCount=10)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]"))
        file_handler.setLevel(level)
        logging.getLogger().addHandler(file_handler)


def create_app(config_name: str | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    Services are built once here from app.config and injected everywhere else.
    """
    # JSON API only; no static files to serve
    app = Flask(__name__, static_folder=None)

    # Load configuration (reads .env via get_config)
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Signing-key misconfiguration is fatal at startup, never per request
    if not app.config.get("JWT_SECRET"):
        raise RuntimeError("JWT_SECRET must be set")
    if config_class is ProductionConfig and app.config["JWT_SECRET"] == DEV_JWT_SECRET:
        raise RuntimeError("JWT_SECRET must be changed from the development default in production")

    configure_logging(app)

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    register_error_handlers(app)

    services.init_app(app)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp
    from .discogs import bp as discogs_bp

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")
    app.register_blueprint(users_bp, url_prefix="/api/v1/auth")
    app.register_blueprint(discogs_bp, url_prefix="/api/v1/auth/discogs")

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Vinyl Collection Auth API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    app.logger.info("Vinyl Collection Auth startup (%s)", app.config["APP_ENV"])
    return app
