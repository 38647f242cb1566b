"""Configuration for TeamHub core."""
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Database
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{Path(__file__).parent / 'teamhub.db'}",
)

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
# Re-raise InvalidArgument instead of answering 400 (fail loudly outside production)
DEBUG = os.getenv("DEBUG", "").lower() in ("1", "true", "yes")

# Outbound notifications (member removed, request decided, ...). Disabled when URL is empty.
NOTIFY_WEBHOOK_URL = os.getenv("NOTIFY_WEBHOOK_URL", "")
NOTIFY_WEBHOOK_SECRET = os.getenv("NOTIFY_WEBHOOK_SECRET", "")
NOTIFY_TIMEOUT_SECONDS = float(os.getenv("NOTIFY_TIMEOUT_SECONDS", "5"))

# Web auth (JWT secret, initial admin bootstrap)
JWT_SECRET = os.getenv("JWT_SECRET", "change-me-in-production-use-long-random-string")
JWT_ALGORITHM = "HS256"
JWT_EXPIRE_DAYS = int(os.getenv("JWT_EXPIRE_DAYS", "7"))
INITIAL_ADMIN_EMAIL = os.getenv("INITIAL_ADMIN_EMAIL", "admin@teamhub.local")
INITIAL_ADMIN_PASSWORD = os.getenv("INITIAL_ADMIN_PASSWORD", "")  # Set to bootstrap first admin
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# Roles accepted at signup (admin is bootstrap-only)
SIGNUP_ROLES = ("player", "manager", "organizer")

# API server (web/run_api.py)
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
