import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS
from sqlalchemy import text
from werkzeug.exceptions import HTTPException

from storefront.core.config import Config, get_config
from storefront.core.exceptions import InternalServerError, ProblemError, problem_from_status
from storefront.db import Database, create_db_engine, get_database
from storefront.routes import admin_bp, auth_bp, cart_bp, products_bp, users_bp

logger = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"
CONFIG_KEY = "storefront.config"


def _problem_response(error: ProblemError):
    response = jsonify(error.to_problem(instance=request.url))
    response.status_code = error.status
    response.mimetype = PROBLEM_MIMETYPE
    return response


def create_app(config: Optional[Config] = None) -> Flask:
    """
    Application factory.

    Tests pass their own Config (in-memory SQLite, low bcrypt cost); every
    other caller gets the environment-driven one.
    """
    config = config or get_config()
    config.validate()

    logging.basicConfig(
        level=getattr(logging, config.app.log_level.upper(), logging.INFO),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    app = Flask(__name__)
    app.config["DEBUG"] = config.app.debug
    app.extensions[CONFIG_KEY] = config

    Database(create_db_engine(config.database)).init_app(app)

    cors = {"origins": config.app.cors_origins}
    CORS(app, resources={r"/api/*": cors, r"/health": cors})

    # ------------------------------------------------------------------ #
    # Blueprints                                                           #
    # ------------------------------------------------------------------ #
    prefix = f"/api/{config.api.version}"
    app.register_blueprint(auth_bp, url_prefix=f"{prefix}/auth")
    app.register_blueprint(users_bp, url_prefix=f"{prefix}/users")
    app.register_blueprint(cart_bp, url_prefix=f"{prefix}/cart")
    app.register_blueprint(products_bp, url_prefix=f"{prefix}/products")
    app.register_blueprint(admin_bp, url_prefix=f"{prefix}/admin")

    # ------------------------------------------------------------------ #
    # Error handlers: every failure is an application/problem+json body   #
    # ------------------------------------------------------------------ #
    @app.errorhandler(ProblemError)
    def handle_problem(e: ProblemError):
        if e.status >= 500:
            logger.error(f"{e.title}: {e.internal_message}")
        else:
            logger.info(f"{e.status} {e.title}: {e.detail or ''}")
        return _problem_response(e)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return _problem_response(problem_from_status(e.code, e.name, e.description))

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.path}")
        detail = str(e) if config.app.debug else None
        return _problem_response(InternalServerError(detail=detail))

    # ------------------------------------------------------------------ #
    # Health check                                                         #
    # ------------------------------------------------------------------ #
    @app.get("/health")
    def health():
        """Liveness + readiness probe. Returns 503 if DB is unreachable."""
        try:
            with get_database().engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as exc:
            logger.error(f"Health check failed: {str(exc)}")
            return jsonify({"status": "error", "database": "unreachable"}), 503
        return jsonify({
            "status": "ok",
            "database": "reachable",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }), 200

    # ------------------------------------------------------------------ #
    # CLI: flask --app storefront.app init-db / seed                       #
    # ------------------------------------------------------------------ #
    @app.cli.command("init-db")
    def init_db_command():
        """Create every table that does not exist yet."""
        get_database(app).create_all()
        print("  [+] Tables created")

    @app.cli.command("seed")
    def seed_command():
        """Populate the database with development data."""
        from storefront.seed import seed

        get_database(app).create_all()
        seed(app)

    return app


if __name__ == "__main__":
    settings = get_config()
    application = create_app(settings)
    application.run(debug=settings.app.debug, host=settings.app.host, port=settings.app.port)
