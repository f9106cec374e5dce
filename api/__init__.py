import logging
import time

from flask import Flask, request, g
from flasgger import Swagger
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from .config import get_config
from .errors import register_error_handlers
from models.db_storage import DBStorage
from services.auth_service import AuthService
from services.catalog_service import CatalogService
from utils.security import PasswordHasher, TokenIssuer

logger = logging.getLogger(__name__)

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "SecondLooks API",
        "version": "1.0.0",
        "description": "E-commerce backend: authentication and product catalog browsing.",
    },
    "basePath": "/",  # blueprints are mounted under /api/<version>
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the access token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
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


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")


def create_app(config_name: str | None = None, storage: DBStorage | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.

    Storage and services are built here, once, and kept in app.extensions.
    Views look them up on current_app; pass `storage` to substitute the
    database (tests do).
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    configure_logging(app.config["LOG_LEVEL"])

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}}, supports_credentials=True)

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    if storage is None:
        storage = DBStorage(app.config["DATABASE_URL"], echo=app.config.get("SQL_ECHO", False))
    storage.reload()

    hasher = PasswordHasher(
        time_cost=app.config["PASSWORD_HASH_TIME_COST"],
        memory_cost=app.config["PASSWORD_HASH_MEMORY_COST"],
    )
    tokens = TokenIssuer.from_config(app.config)

    app.extensions["storage"] = storage
    app.extensions["token_issuer"] = tokens
    app.extensions["auth_service"] = AuthService(storage, hasher, tokens)
    app.extensions["catalog_service"] = CatalogService(storage)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .products import bp as products_bp

    # every blueprint is mounted under /api and draws from the same budget
    limiter = Limiter(key_func=get_remote_address)
    limiter.init_app(app)
    api_limit = limiter.shared_limit(lambda: app.config["RATELIMIT_API"], scope="api")
    for bp in (health_bp, auth_bp, products_bp):
        api_limit(bp)

    prefix = f"/api/{app.config['API_VERSION']}"
    app.register_blueprint(health_bp, url_prefix=prefix)
    app.register_blueprint(auth_bp, url_prefix=f"{prefix}/auth")
    app.register_blueprint(products_bp, url_prefix=f"{prefix}/products")

    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    # Access log, one line per request
    @app.after_request
    def log_request(response):
        started = g.pop("request_started", None)
        elapsed = (time.perf_counter() - started) * 1000 if started else 0.0
        logger.info(
            '%s "%s %s" %s %.1fms',
            request.remote_addr,
            request.method,
            request.full_path.rstrip("?"),
            response.status_code,
            elapsed,
        )
        return response

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    @app.route("/")
    def root():
        return {
            "success": True,
            "message": app.config["APP_NAME"],
            "version": app.config["API_VERSION"],
            "documentation": f"{prefix}/health",
            "docs": "/apidocs/",
        }, 200

    return app
