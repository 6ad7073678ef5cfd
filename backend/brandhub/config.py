# backend/brandhub/config.py
from __future__ import annotations
import os


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored next to the backend by default; Postgres in production
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///brandhub.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # bcrypt cost factor; tests lower it to keep the suite fast
    BCRYPT_ROUNDS = _int_env("BCRYPT_ROUNDS", 12)

    # Session lifetime
    SESSION_ABSOLUTE_TIMEOUT_HOURS = _int_env("SESSION_ABSOLUTE_TIMEOUT_HOURS", 24)
    SESSION_IDLE_TIMEOUT_HOURS = _int_env("SESSION_IDLE_TIMEOUT_HOURS", 2)

    # Public origin used to build landing page URLs encoded into QR codes
    PUBLIC_BASE_URL = os.environ.get("PUBLIC_BASE_URL", "http://localhost:5173").rstrip("/")

    # Upload size ceilings per file type (bytes)
    MAX_IMAGE_BYTES = _int_env("MAX_IMAGE_BYTES", 5 * 1024 * 1024)
    MAX_PDF_BYTES = _int_env("MAX_PDF_BYTES", 20 * 1024 * 1024)
    MAX_VIDEO_BYTES = _int_env("MAX_VIDEO_BYTES", 200 * 1024 * 1024)

    CORS_ALLOWED_ORIGINS = {
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:4173,http://127.0.0.1:4173",
        ).split(",")
        if origin.strip()
    }
