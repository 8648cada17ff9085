"""Configuration module for the SchoolHub API.

This module provides centralized configuration management, including directory
paths, database and API server settings, authentication and QR enrollment
defaults. All configuration values can be overridden via environment variables.
"""

import os
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import pytz
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory name
DATA_DIR_NAME = "data"
DATA_DIR = Path(os.getenv("DATA_DIR", str(ROOT_DIR / DATA_DIR_NAME)))

# --- Database Configuration ---

DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR}/schoolhub.db")

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))

# CORS allowed origins (comma-separated list)
# Default includes local development addresses. For production, set via
# CORS_ALLOWED_ORIGINS environment variable.
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,"
    "http://127.0.0.1:3000",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Authentication Configuration ---

JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "your-secret-key-change-in-production")
JWT_ALGORITHM: str = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
    os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7))  # 7 days
)

# Admin token for developer/admin registration (set via ADMIN_TOKEN environment variable)
ADMIN_TOKEN: Optional[str] = os.getenv("ADMIN_TOKEN")

ROLES: List[str] = ["developer", "admin", "teacher", "student", "parent", "accounting"]
PRIVILEGED_ROLES: List[str] = ["developer", "admin"]

# --- QR Enrollment Configuration ---

# Public origin of the web client; enrollment links are {PUBLIC_BASE_URL}/enroll/{code}
PUBLIC_BASE_URL: str = os.getenv("PUBLIC_BASE_URL", "http://localhost:5173").rstrip("/")

# External image service used to render enrollment links as QR images
QR_IMAGE_SERVICE_URL: str = os.getenv(
    "QR_IMAGE_SERVICE_URL", "https://api.qrserver.com/v1/create-qr-code/"
)
QR_IMAGE_SIZE: int = int(os.getenv("QR_IMAGE_SIZE", "300"))

# Length of generated enrollment codes and how many collisions to tolerate
QR_CODE_LENGTH: int = int(os.getenv("QR_CODE_LENGTH", "8"))
QR_CODE_MAX_ATTEMPTS: int = int(os.getenv("QR_CODE_MAX_ATTEMPTS", "5"))

# Uppercase alphabet without look-alike characters (0/O, 1/I/L)
QR_CODE_ALPHABET: str = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"

# --- Demo Data Configuration ---

SEED_DEMO_DATA: bool = os.getenv("SEED_DEMO_DATA", "false").lower() == "true"
DEMO_PASSWORD: str = os.getenv("DEMO_PASSWORD", "demo123")


def get_current_school_year() -> str:
    """Return the school year new codes and assignments are filed under.

    Defaults to the current UTC calendar year unless CURRENT_SCHOOL_YEAR is set.
    """
    override = os.getenv("CURRENT_SCHOOL_YEAR")
    if override:
        return override.strip()
    return str(datetime.now(pytz.utc).year)
