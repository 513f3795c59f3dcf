# resume_gate/__init__.py

from flask import Flask
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from dotenv import load_dotenv
import logging
import os

# ======================================================
# Load environment first
# ======================================================
load_dotenv()

db = SQLAlchemy()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per hour"],
    storage_uri="memory://"
)


def _env_flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).strip().lower() not in ("0", "false", "no", "off")


def create_app(test_config=None):
    app = Flask(__name__)

    # ==================================================
    # Database
    # ==================================================
    app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL", "sqlite:///resume_gate.db")
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    if not app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite"):
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = {
            "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
            "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", "10")),
            "pool_pre_ping": True,
            "pool_recycle": 1800,
        }

    # ==================================================
    # Approval window / links
    # ==================================================
    app.config["LINK_EXPIRY_MS"] = int(os.getenv("LINK_EXPIRY_MS", str(3 * 60 * 1000)))
    app.config["BACKEND_URL"] = os.getenv("BACKEND_URL", "http://localhost:5000")
    app.config["FRONTEND_ORIGIN"] = os.getenv("FRONTEND_ORIGIN", "*")
    app.config["EXPIRY_TIMER_ENABLED"] = _env_flag("EXPIRY_TIMER_ENABLED")

    # ==================================================
    # Document served on approval
    # ==================================================
    app.config["RESUME_DIR"] = os.getenv("RESUME_DIR", app.root_path)
    app.config["RESUME_FILENAME"] = os.getenv("RESUME_FILENAME", "resume.pdf")

    # ==================================================
    # SMTP
    # ==================================================
    app.config["ADMIN_EMAIL"] = os.getenv("ADMIN_EMAIL")
    for key in ("SMTP_HOST", "SMTP_USERNAME", "SMTP_PASSWORD", "SMTP_FROM", "SMTP_FROM_ALIAS"):
        app.config[key] = os.getenv(key)
    app.config["SMTP_PORT"] = int(os.getenv("SMTP_PORT", "587"))
    app.config["SMTP_USE_TLS"] = os.getenv("SMTP_USE_TLS", "true")

    # ==================================================
    # Rate limiting / logging
    # ==================================================
    app.config["SUBMIT_RATE_LIMIT"] = os.getenv("SUBMIT_RATE_LIMIT", "10 per hour")
    app.config["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO")

    # MAILER / CLOCK replace the SMTP mailer and wall clock; they are not config.
    overrides = dict(test_config or {})
    mailer = overrides.pop("MAILER", None)
    clock = overrides.pop("CLOCK", None)
    app.config.update(overrides)

    logging.basicConfig(
        level=getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not (app.config["SMTP_USERNAME"] and app.config["SMTP_PASSWORD"]):
        app.logger.warning("SMTP_USERNAME or SMTP_PASSWORD missing; emails will fail.")

    CORS(app, origins=app.config["FRONTEND_ORIGIN"], max_age=600)
    limiter.init_app(app)
    db.init_app(app)

    # ==================================================
    # Lifecycle wiring
    # ==================================================
    from resume_gate.documents import DocumentStore
    from resume_gate.expiry import ExpiryScheduler
    from resume_gate.lifecycle import RequestLifecycle
    from resume_gate.mailer import Mailer
    from resume_gate.models import utcnow
    from resume_gate.store import RequestStore

    app.extensions["resume_gate"] = RequestLifecycle(
        store=RequestStore(),
        mailer=mailer or Mailer.from_config(app.config),
        documents=DocumentStore(app.config["RESUME_DIR"], app.config["RESUME_FILENAME"]),
        scheduler=ExpiryScheduler(app, enabled=app.config["EXPIRY_TIMER_ENABLED"]),
        expiry_ms=app.config["LINK_EXPIRY_MS"],
        backend_url=app.config["BACKEND_URL"],
        clock=clock or utcnow,
    )

    # ==================================================
    # Blueprints / CLI
    # ==================================================
    from resume_gate.routes.requests import requests_bp
    from resume_gate.cli import register_commands

    app.register_blueprint(requests_bp)
    register_commands(app)

    # ==================================================
    # Database Initialization (tables)
    # ==================================================
    with app.app_context():
        db.create_all()

    # ==================================================
    # Security Headers
    # ==================================================
    @app.after_request
    def apply_security_headers(response):
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    # ==================================================
    # Basic Routes
    # ==================================================
    @app.route("/status")
    def status():
        return "Resume Gate is running."

    return app

