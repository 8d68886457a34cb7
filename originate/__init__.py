from datetime import datetime, timezone

from flask import Flask
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .config import Config
from .errors import OriginateError
from .extensions import db, jwt, limiter, migrate
from .logging_config import configure_logging


def create_app(config_class: type[Config] = Config) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_class)
    configure_logging(app)
    CORS(app, origins=app.config.get("CORS_ORIGINS", "*"), supports_credentials=True)

    db.init_app(app)
    jwt.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    register_error_handlers(app)
    register_blueprints(app)

    @app.get("/health")
    def health_check() -> tuple[dict[str, str], int]:
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": app.config["SERVICE_NAME"],
        }, 200

    @app.get("/api/hello")
    def hello() -> tuple[dict[str, str], int]:
        return {
            "message": f"Welcome to {app.config['SERVICE_NAME']}",
            "version": app.config["API_VERSION"],
        }, 200

    @app.get("/")
    def index() -> tuple[dict[str, object], int]:
        return {
            "service": app.config["SERVICE_NAME"],
            "version": app.config["API_VERSION"],
            "endpoints": ["/health", "/api/hello", "/api/v1/profiles/me", "/api/v1/orders"],
        }, 200

    app.logger.info("%s started (CORS origins: %s)", app.config["SERVICE_NAME"], app.config.get("CORS_ORIGINS"))
    return app


def register_blueprints(app: Flask) -> None:
    from .api.v1.address_routes import address_bp
    from .api.v1.connection_routes import connection_bp
    from .api.v1.order_routes import order_bp
    from .api.v1.product_routes import product_bp
    from .api.v1.profile_routes import company_bp, profile_bp, supplier_bp
    from .api.v1.relationship_routes import relationship_bp

    app.register_blueprint(profile_bp, url_prefix="/api/v1/profiles")
    app.register_blueprint(supplier_bp, url_prefix="/api/v1/suppliers")
    app.register_blueprint(company_bp, url_prefix="/api/v1/companies")
    app.register_blueprint(relationship_bp, url_prefix="/api/v1/relationships")
    app.register_blueprint(connection_bp, url_prefix="/api/v1/connections")
    app.register_blueprint(address_bp, url_prefix="/api/v1/addresses")
    app.register_blueprint(product_bp, url_prefix="/api/v1/products")
    app.register_blueprint(order_bp, url_prefix="/api/v1/orders")


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(OriginateError)
    def handle_originate_error(error: OriginateError):
        headers = {"Retry-After": "5"} if error.retryable else {}
        return error.to_dict(), error.status_code, headers

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return {"error": error.name.lower().replace(" ", "_"), "message": error.description}, error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        app.logger.error("Unhandled error: %s", error, exc_info=True)
        return {"error": "internal_error", "message": "Something went wrong!"}, 500

    @jwt.unauthorized_loader
    def missing_token(reason: str):
        return {"error": "authentication_required", "message": reason}, 401

    @jwt.invalid_token_loader
    def invalid_token(reason: str):
        return {"error": "invalid_token", "message": reason}, 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return {"error": "token_expired", "message": "Your session has expired. Sign in again."}, 401
