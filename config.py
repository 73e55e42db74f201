import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./sessions.db")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    LOG_JSON = bool(data.get("LOG_JSON", False))
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    JWT_ALGORITHM = data.get("JWT_ALGORITHM", "HS256")
    JWT_ACCESS_TOKEN_TTL = data.get("JWT_ACCESS_TOKEN_TTL", "15m")
    JWT_REFRESH_TOKEN_TTL = data.get("JWT_REFRESH_TOKEN_TTL", "7d")
    DB_RETRY_MAX_ATTEMPTS = int(data.get("DB_RETRY_MAX_ATTEMPTS", 3))
    DB_RETRY_BASE_DELAY_MS = int(data.get("DB_RETRY_BASE_DELAY_MS", 100))
    DB_RETRY_MAX_DELAY_MS = int(data.get("DB_RETRY_MAX_DELAY_MS", 1000))
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")
