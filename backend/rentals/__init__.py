import logging
from pathlib import Path

import pymysql
pymysql.install_as_MySQLdb()
from flask import Flask, send_from_directory
from flask_cors import CORS

from .config import DevConfig
from .extensions import db, migrate, ma
from .utils.errors import register_error_handlers
from .api import auth_routes, user_routes, listing_routes, booking_routes
from .cli import register_cli


def create_app(config_class=DevConfig) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Uploaded listing images live under UPLOADS_DIR/properties
    uploads_dir = Path(app.config["UPLOADS_DIR"]).resolve()
    (uploads_dir / "properties").mkdir(parents=True, exist_ok=True)
    app.config["UPLOADS_DIR"] = str(uploads_dir)

    app.logger.setLevel(app.config.get("LOG_LEVEL", logging.INFO))

    CORS(
        app,
        resources={
            r"/api/*": {"origins": app.config["FRONTEND_URL"]},
            r"/uploads/*": {"origins": app.config["FRONTEND_URL"]},
        },
        supports_credentials=True,
        allow_headers=["Content-Type", "Authorization"],
    )

    db.init_app(app)
    migrate.init_app(app, db)
    ma.init_app(app)

    # auth routes share the /api prefix: /api/login, /api/logout, /api/users/register
    app.register_blueprint(auth_routes.bp, url_prefix="/api")
    app.register_blueprint(user_routes.bp, url_prefix="/api/users")
    app.register_blueprint(listing_routes.bp, url_prefix="/api/listings")
    app.register_blueprint(booking_routes.bp, url_prefix="/api/bookings")

    register_error_handlers(app)
    register_cli(app)

    @app.get("/")
    def index():
        return {"message": "Backend running!", "status": "healthy"}

    @app.get("/api/health")
    def health_check():
        return {"status": "ok", "service": "rentals-backend"}

    @app.get("/uploads/<path:filename>")
    def serve_upload(filename: str):
        return send_from_directory(app.config["UPLOADS_DIR"], filename)

    return app
