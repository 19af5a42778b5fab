"""Configuration module for the quiz application."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from config.logging_config import configure_logging

logger = logging.getLogger(__name__)

current_dir = Path(__file__).parent
project_root = current_dir.parent

# Try to load .env from the project root first, then the working directory
env_loaded = False
for env_path in [project_root / ".env", Path.cwd() / ".env"]:
    if env_path.exists():
        load_dotenv(env_path)
        env_loaded = True
        break

if not env_loaded:
    load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration class."""

    # API Keys
    GROQ_API_KEY = os.getenv("GROQ_API_KEY")
    GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")
    GROQ_VISION_MODEL = os.getenv("GROQ_VISION_MODEL", "meta-llama/llama-4-scout-17b-16e-instruct")
    GROQ_TIMEOUT = float(os.getenv("GROQ_TIMEOUT", "60"))

    # Flask Configuration
    SECRET_KEY = os.getenv("FLASK_SECRET_KEY", "dev_only_secret_change_me")

    # CORS Configuration
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # Application Settings
    HOST = os.getenv("HOST", "127.0.0.1")
    PORT = int(os.getenv("PORT", "5000"))
    DEBUG = _env_bool("FLASK_DEBUG", True)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Storage Settings
    STORE_BACKEND = os.getenv("STORE_BACKEND", "auto")  # auto | firestore | local
    FIREBASE_SERVICE_ACCOUNT_PATH = os.getenv("FIREBASE_SERVICE_ACCOUNT_PATH", "./serviceAccountKey.json")
    DATA_DIR = os.getenv("DATA_DIR", str(project_root / "data"))

    # Upload Settings
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB max file size

    # Quiz Settings
    DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "English")
    DEFAULT_NUM_QUESTIONS = 5
    MAX_NUM_QUESTIONS = 20
    ALLOW_RESUBMISSION = _env_bool("ALLOW_RESUBMISSION", False)

    @classmethod
    def validate(cls):
        """Validate required configuration."""
        if not cls.GROQ_API_KEY:
            raise RuntimeError("GROQ_API_KEY is missing in environment (.env).")
        logger.info("Configuration validated successfully")


__all__ = ["Config", "configure_logging"]
