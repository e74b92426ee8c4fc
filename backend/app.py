import logging
from typing import Any, Optional

from flask import Flask, jsonify
from flask_cors import CORS

from config import Settings
from db import build_engine, make_session_factory, init_db, database_status, is_in_memory_url
from errors import CatalogError, StorageFault
from routes.products import products_bp
from services.ledger import DiscountLedger
from services.seed import seed_products

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    # Configure high-level logging defaults for the backend application
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s - %(levelname)s - %(message)s")


def create_app(settings: Optional[Settings] = None, engine=None) -> Flask:
    """
    Builds the Flask application around an explicitly constructed database handle.

    Args:
        settings: Runtime configuration; read from the environment when omitted.
        engine: SQLAlchemy engine to use instead of one built from DATABASE_URL.

    Returns:
        The configured Flask application. The DiscountLedger is available as
        app.extensions["discount_ledger"].

    Raises:
        ValueError: DATABASE_URL points at an in-memory SQLite database. Tests
            that want one build the engine themselves and pass it in.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings)

    if engine is None:
        if is_in_memory_url(settings.DATABASE_URL):
            raise ValueError("In-memory SQLite cannot back a multi-threaded server; use a file or server database")
        engine = build_engine(settings.DATABASE_URL)
    init_db(engine)
    ledger = DiscountLedger(make_session_factory(engine))

    if settings.SEED_ON_STARTUP:
        seed_products(ledger)

    app = Flask(__name__)
    app.config["SETTINGS"] = settings
    app.extensions["db_engine"] = engine
    app.extensions["discount_ledger"] = ledger
    CORS(app, origins=settings.cors_origins)

    app.register_blueprint(products_bp, url_prefix="/api/v1")

    @app.errorhandler(CatalogError)
    def handle_catalog_error(error: CatalogError) -> Any:
        if isinstance(error, StorageFault):
            logger.error(f"Request failed with storage fault: {error} ({error.__cause__!r})")
        return jsonify(error.to_dict()), error.status_code

    @app.route("/api/v1/health")
    def health() -> Any:
        """
        Verifies the operational status of the Flask application and its database.

        Returns:
            A JSON response with the service status and database details.
        """
        status = database_status(engine)
        return jsonify({
            "status": "ok" if status["connected"] else "degraded",
            "database": status,
        }), 200 if status["connected"] else 503

    return app


if __name__ == "__main__":
    settings = Settings.from_env()
    app = create_app(settings)
    app.run(port=settings.PORT, debug=True)
