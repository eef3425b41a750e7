import logging
import os

from flask import Flask

from .extensions import db, login_manager, migrate


def _configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    app.logger.setLevel(level)
    if not any(getattr(h, "_bizflow", False) for h in app.logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        handler._bizflow = True
        app.logger.addHandler(handler)


def create_app(config_object=None):
    app = Flask(__name__, instance_relative_config=True)

    # ensure instance folder exists (Flask-managed)
    os.makedirs(app.instance_path, exist_ok=True)

    # Load config by environment
    env = os.getenv("FLASK_ENV", "development").lower()
    if config_object is None:
        config_object = "config.ProductionConfig" if env == "production" else "config.DevelopmentConfig"
    app.config.from_object(config_object)

    if app.config.get("ENV") == "production":
        missing = []
        if not os.getenv("SECRET_KEY"):
            missing.append("SECRET_KEY")
        if not os.getenv("DATABASE_URL"):
            missing.append("DATABASE_URL")
        if not os.getenv("PAYSTACK_SECRET_KEY") or not os.getenv("PAYSTACK_PUBLIC_KEY"):
            missing.append("PAYSTACK_SECRET_KEY/PAYSTACK_PUBLIC_KEY")

        if missing:
            raise RuntimeError("Missing required production settings: " + ", ".join(missing))

    # If using sqlite and path is relative, force it into instance_path (Windows-safe)
    uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if uri.startswith("sqlite:///") and not uri.startswith("sqlite:////"):
        db_file = os.path.join(app.instance_path, "app.db")
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///" + db_file.replace("\\", "/")

    _configure_logging(app)

    # Init extensions
    db.init_app(app)
    import sqlite3
    from decimal import Decimal
    sqlite3.register_adapter(Decimal, lambda d: str(d))
    login_manager.init_app(app)
    migrate.init_app(app, db)

    from . import models  # noqa: F401  (register tables with metadata)
    from .errors import register_error_handlers
    register_error_handlers(app)

    # Blueprints
    from bizflow.auth import auth_bp
    from bizflow.subscriptions import subscription_bp
    from bizflow.referrals import referral_bp
    from bizflow.admin import admin_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(subscription_bp)
    app.register_blueprint(referral_bp)
    app.register_blueprint(admin_bp)

    from .cli import register_commands
    register_commands(app)

    app.logger.debug("Bizflow app created (env=%s)", app.config.get("ENV"))
    return app
