from flask import Flask, request
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from models import AccountStore, DBStorage
from services.accounts import AccountService
from services.session_guard import SessionGuard
from services.tokens import TokenService
from utils.exceptions import PayloadTooLarge
from utils.media import CloudinaryUploader

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0.0",
    "info": {
        "title": "Account Service API",
        "version": "1.0.0",
        "description": "User accounts: registration, login/logout, token refresh, profile and media updates.",
    },
    "basePath": "/",  # blueprints are mounted under /api/v1
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
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

# Body types held to JSON_BODY_LIMIT; multipart uploads only to MAX_CONTENT_LENGTH
LIMITED_MIMETYPES = ("application/json", "application/x-www-form-urlencoded")


def create_app(config_name: str | None = None, uploader=None, test_config: dict | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.

    Every collaborator (storage, token service, session guard, account
    operations, uploader) is built here from the selected configuration and
    kept in app.extensions. `uploader` and `test_config` let tests swap the
    media host and override settings.
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    if test_config:
        app.config.update(test_config)

    # Cross-Origin Resource Sharing; cookies need credentials
    origins = app.config.get("CORS_ORIGINS", "*")
    if origins != "*":
        origins = [o.strip() for o in origins.split(",") if o.strip()]
    CORS(app, resources={r"/*": {"origins": origins}}, supports_credentials=True)

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    storage = DBStorage(app.config["DATABASE_URL"], echo=app.config.get("SQLALCHEMY_ECHO", False))
    storage.reload()
    store = AccountStore(storage)
    tokens = TokenService.from_config(store, app.config)
    if uploader is None:
        uploader = CloudinaryUploader.from_config(app.config)

    app.extensions["storage"] = storage
    app.extensions["account_store"] = store
    app.extensions["token_service"] = tokens
    app.extensions["session_guard"] = SessionGuard(store, tokens)
    app.extensions["media_uploader"] = uploader
    app.extensions["accounts"] = AccountService(store, tokens, uploader)

    from .health import bp as health_bp
    from .users import bp as users_bp

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(users_bp, url_prefix="/api/v1/users")

    @app.before_request
    def limit_body_size():
        limit = app.config.get("JSON_BODY_LIMIT")
        if limit and request.mimetype in LIMITED_MIMETYPES and (request.content_length or 0) > limit:
            raise PayloadTooLarge(f"Request body exceeds {limit} bytes")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # This calls scoped_session.remove(), preventing connection leaks
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Account Service API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    return app
