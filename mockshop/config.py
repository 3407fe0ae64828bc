import os
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

# .env.local carries the persisted backend switch and wins over .env
load_dotenv(BASE_DIR / ".env.local")
load_dotenv()


def env_flag(name: str, default: str = "false") -> bool:
    return str(os.getenv(name, default)).strip().lower() in {"1", "true", "yes", "on"}


def _default_db_dir(app_env: str) -> Path:
    return BASE_DIR / ("test-db" if app_env == "test" else "db")


class Config:
    BASE_DIR = BASE_DIR
    APP_ENV = os.getenv("APP_ENV", "development")
    FIXTURES_DIR = Path(os.getenv("FIXTURES_DIR") or BASE_DIR / "mock_data")
    DB_DIR = Path(os.getenv("DB_DIR") or _default_db_dir(APP_ENV))
    # USE_NEDB is the older name of the same switch
    USE_DOCUMENT_STORE = env_flag("USE_DOCUMENT_STORE", os.getenv("USE_NEDB", "true"))
    ENV_FILE = Path(os.getenv("ENV_FILE") or BASE_DIR / ".env.local")

    AUTH_ENABLED = env_flag("AUTH_ENABLED", "true")
    API_USERNAME = os.getenv("API_USERNAME", "admin")
    API_PASSWORD = os.getenv("API_PASSWORD", "admin123")
    ADMIN_KEY = os.getenv("ADMIN_KEY", "")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    DEFAULT_PAGE_LIMIT = 20
    OTP_TTL_SECONDS = int(os.getenv("OTP_TTL_SECONDS", "300"))


class DevConfig(Config):
    DEBUG = True


class ProdConfig(Config):
    DEBUG = False
    APP_ENV = "production"


class TestConfig(Config):
    TESTING = True
    APP_ENV = "test"
    DB_DIR = _default_db_dir("test")
    LOG_LEVEL = "WARNING"
