import os
from datetime import timedelta


def _env_int(name, default):
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


def _env_float(name, default):
    try:
        return float(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-me")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Database
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL") or os.environ.get("SQLALCHEMY_DATABASE_URI")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    DB_POOL_TIMEOUT = _env_int("DB_POOL_TIMEOUT", 10)
    AUTO_CREATE_TABLES = os.environ.get("AUTO_CREATE_TABLES", "1") == "1"

    # Session tokens
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-secret-change-me")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=24)
    JWT_TOKEN_LOCATION = ["headers"]
    BCRYPT_LOG_ROUNDS = _env_int("BCRYPT_LOG_ROUNDS", 12)

    # Registration
    PENDING_IDENTITY_MAX_AGE = _env_int("PENDING_IDENTITY_MAX_AGE", 3600)
    DEFAULT_PLAN_ID = os.environ.get("DEFAULT_PLAN_ID", "free")

    # HTTP surface
    FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:8080")
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")
    URL_PREFIX = os.environ.get("URL_PREFIX", "")

    # OAuth providers
    GOOGLE_CLIENT_ID = os.environ.get("GOOGLE_CLIENT_ID")
    GOOGLE_CLIENT_SECRET = os.environ.get("GOOGLE_CLIENT_SECRET")
    FACEBOOK_APP_ID = os.environ.get("FACEBOOK_APP_ID")
    FACEBOOK_APP_SECRET = os.environ.get("FACEBOOK_APP_SECRET")
    OAUTH_CALLBACK_BASE_URL = os.environ.get("OAUTH_CALLBACK_BASE_URL")
    OAUTH_HTTP_TIMEOUT = _env_float("OAUTH_HTTP_TIMEOUT", 10)

    # Email: Gmail wins over Brevo, neither means log-only
    GMAIL_EMAIL = os.environ.get("GMAIL_EMAIL")
    GMAIL_APP_PASSWORD = os.environ.get("GMAIL_APP_PASSWORD")
    BREVO_EMAIL = os.environ.get("BREVO_EMAIL")
    BREVO_API_KEY = os.environ.get("BREVO_API_KEY")
    MAIL_TIMEOUT = _env_float("MAIL_TIMEOUT", 10)

    @staticmethod
    def init_app(app):
        if not app.config.get("SQLALCHEMY_DATABASE_URI"):
            os.makedirs(app.instance_path, exist_ok=True)
            app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{os.path.join(app.instance_path, 'app.db')}"

        # sqlite pools take no timeout; server databases get a bounded checkout
        if not app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite"):
            options = app.config.setdefault("SQLALCHEMY_ENGINE_OPTIONS", {})
            options.setdefault("pool_pre_ping", True)
            options.setdefault("pool_timeout", app.config["DB_POOL_TIMEOUT"])


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    JWT_SECRET_KEY = "test-jwt-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    AUTO_CREATE_TABLES = False
    BCRYPT_LOG_ROUNDS = 4
    FRONTEND_URL = "http://frontend.test"
    URL_PREFIX = ""
    GOOGLE_CLIENT_ID = "google-client-id"
    GOOGLE_CLIENT_SECRET = "google-client-secret"
    FACEBOOK_APP_ID = "facebook-app-id"
    FACEBOOK_APP_SECRET = "facebook-app-secret"
    OAUTH_CALLBACK_BASE_URL = "http://api.test"
    GMAIL_EMAIL = None
    GMAIL_APP_PASSWORD = None
    BREVO_EMAIL = None
    BREVO_API_KEY = None
