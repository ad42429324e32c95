"""
backend/trainerhub/config.py

Purpose:
    Central settings loading for the backend: auth secrets, the JSON data
    directory and store behavior.

Dependencies:
    - pydantic-settings
    - pathlib
"""

from pathlib import Path

from pydantic_settings import BaseSettings

# Prefer backend/.env, fallback to project-root .env.
_BACKEND_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"
_ROOT_ENV_FILE = Path(__file__).resolve().parent.parent.parent / ".env"


class Settings(BaseSettings):
    JWT_SECRET: str
    JWT_SECRET_OLD: str = ""  # Set during rotation; cleared once old tokens expire
    BACKEND_CORS_ORIGINS: str = "*"

    # JWT settings
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # JSON collection store
    DATA_DIR: str = str(Path(__file__).resolve().parent.parent / "data")
    # False reproduces the unserialized read-modify-write behavior (lost updates)
    STORE_SERIALIZE_WRITES: bool = True

    LOG_LEVEL: str = "INFO"

    model_config = {
        "env_file": (str(_BACKEND_ENV_FILE), str(_ROOT_ENV_FILE)),
        "extra": "ignore",
    }


settings = Settings()
