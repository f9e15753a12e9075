import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.environ.get("CONFIG_FILE_PATH", os.path.join(ROOT_PATH, "env.yaml"))

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


def _get(key, default=None):
    # Environment variables win over env.yaml
    if key in os.environ:
        return os.environ[key]
    return data.get(key, default)


def _get_bool(key, default):
    value = _get(key, default)
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _get_list(key, default):
    value = _get(key, default)
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return list(value)


BASE_URL = _get("BASE_URL", "http://localhost:8000")


class ApplicationConfig:
    DB_URI = _get("DB_URI", "sqlite+aiosqlite:///./test.db")
    API_PORT = int(_get("API_PORT", 8000))
    API_HOST = _get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = _get_list("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = _get_bool("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = _get("LOG_LEVEL", "INFO")

    BASE_URL = BASE_URL
    OAUTH2_ISSUER = _get("OAUTH2_ISSUER", BASE_URL)
    ACCESS_TOKEN_EXPIRY = int(_get("ACCESS_TOKEN_EXPIRY", 3600))
    REFRESH_TOKEN_EXPIRY = int(_get("REFRESH_TOKEN_EXPIRY", 2592000))
    AUTHORIZATION_CODE_EXPIRY = int(_get("AUTHORIZATION_CODE_EXPIRY", 600))
    ID_TOKEN_EXPIRY = int(_get("ID_TOKEN_EXPIRY", 3600))
    LOGIN_CHALLENGE_EXPIRY = int(_get("LOGIN_CHALLENGE_EXPIRY", 600))
    PASSWORD_RESET_EXPIRY = int(_get("PASSWORD_RESET_EXPIRY", 3600))

    SESSION_SECRET = _get("SESSION_SECRET", "change-this-secret-in-production")
    SESSION_COOKIE_NAME = _get("SESSION_COOKIE_NAME", "prismauth_session")
    SESSION_MAX_AGE = int(_get("SESSION_MAX_AGE", 60 * 60 * 24 * 7))
    SESSION_COOKIE_SECURE = _get_bool("SESSION_COOKIE_SECURE", False)

    JWT_PRIVATE_KEY = _get("JWT_PRIVATE_KEY")
    JWT_PUBLIC_KEY = _get("JWT_PUBLIC_KEY")
    JWT_KEY_ID = str(_get("JWT_KEY_ID", "1"))

    MFA_ISSUER = _get("MFA_ISSUER", "PrismAuth")

    CACHE_BACKEND = _get("CACHE_BACKEND", "memory")
    REDIS_URL = _get("REDIS_URL", "redis://localhost:6379/0")
    CACHE_TTL = int(_get("CACHE_TTL", 300))

    EMAIL_PROVIDER = _get("EMAIL_PROVIDER", "console")
    EMAIL_FROM = _get("EMAIL_FROM", "noreply@prismauth.local")
    RESEND_API_KEY = _get("RESEND_API_KEY", "")

    ADMIN_API_KEY = _get("ADMIN_API_KEY", "test-admin-key-12345")
