# --- simoly/__init__.py ---
from flask import Flask, jsonify

from .config import Config
from .extensions import db, jwt, cors, migrate


def create_app(config_object=None):
    app = Flask(__name__, instance_relative_config=True)

    config_object = config_object or Config
    app.config.from_object(config_object)
    config_object.init_app(app)
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Init extensions
    db.init_app(app)
    jwt.init_app(app)
    origins = [o.strip() for o in app.config["CORS_ORIGINS"].split(",") if o.strip()]
    cors.init_app(app, resources={r"/*": {"origins": origins or "*"}})
    migrate.init_app(app, db)

    from .errors import register_error_handlers
    register_error_handlers(app)

    from .services.email_service import init_mail
    from .services.oauth_clients import init_oauth
    from .services.payments import init_payments
    init_mail(app)
    init_oauth(app)
    init_payments(app)

    # Register blueprints
    prefix = app.config["URL_PREFIX"].rstrip("/")
    from .auth import bp as auth_bp; app.register_blueprint(auth_bp, url_prefix=prefix or None)
    from .oauth import bp as oauth_bp; app.register_blueprint(oauth_bp, url_prefix=prefix or None)
    from .plans import bp as plans_bp; app.register_blueprint(plans_bp, url_prefix=prefix or None)
    from .admin import bp as admin_bp; app.register_blueprint(admin_bp, url_prefix=f"{prefix}/admin")

    from .cli import register_cli
    register_cli(app)

    @app.get("/")
    def health():
        return jsonify(success=True, message="API running")

    if app.config["AUTO_CREATE_TABLES"]:
        with app.app_context():
            db.create_all()

    return app
