# phishsim/config.py

"""
Phishing Simulation Platform Configuration

Both services (management and simulation) read the same settings. Create a
`.env` file at your project root containing:

# ── Database ─────────────────────────────────────────────────────────────────────
# PostgreSQL (recommended in Docker or prod):
DATABASE_URL=postgresql://<DB_USER>:<DB_PASS>@<DB_HOST>:<DB_PORT>/<DB_NAME>
# Fallback (if you omit DATABASE_URL): uses SQLite at ./phishsim.db

# ── SMTP (simulation service) ───────────────────────────────────────────────────
SMTP_SERVER=localhost
SMTP_PORT=1025
# Leave user/password empty for MailHog
SMTP_USER=
SMTP_PASSWORD=
SMTP_USE_TLS=false
SMTP_MAX_CONNECTIONS=5
SMTP_MAX_MESSAGES=100
EMAIL_FROM=security-team@example.com
CLICK_TRACKING_BASE_URL=http://localhost:8000/phishing/click

# ── Private channel (management service) ────────────────────────────────────────
SIMULATION_URL=http://localhost:3333
CHANNEL_TIMEOUT_SECONDS=30

# ── Public pages & auth ─────────────────────────────────────────────────────────
AWARENESS_PAGE_URL=http://localhost:3000
SECRET_KEY=change-me
TOKEN_MAX_AGE_SECONDS=86400

# ── Logging / dev ───────────────────────────────────────────────────────────────
ERROR_LOG_PATH=error_log.txt
LOG_LEVEL=INFO
DEV_MODE=false
"""

import os
from dotenv import load_dotenv

# Load any variables defined in a .env file into the environment
load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


class Settings:
    # ── Database URL ────────────────────────────────────────────────────────────
    DB_URL: str = os.getenv("DATABASE_URL", "sqlite:///./phishsim.db")

    # ── SMTP Server Settings ────────────────────────────────────────────────────
    SMTP_SERVER: str = os.getenv("SMTP_SERVER", "localhost")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", 1025))
    SMTP_USER: str = os.getenv("SMTP_USER", "")
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
    SMTP_USE_TLS: bool = _flag("SMTP_USE_TLS")
    SMTP_TIMEOUT: float = float(os.getenv("SMTP_TIMEOUT", 10))
    # Pool bounds, per simulation process
    SMTP_MAX_CONNECTIONS: int = int(os.getenv("SMTP_MAX_CONNECTIONS", 5))
    SMTP_MAX_MESSAGES: int = int(os.getenv("SMTP_MAX_MESSAGES", 100))
    EMAIL_FROM: str = os.getenv("EMAIL_FROM", "security-team@example.com")

    # Tracking links point back at the management service's public route
    CLICK_TRACKING_BASE_URL: str = os.getenv(
        "CLICK_TRACKING_BASE_URL",
        "http://localhost:8000/phishing/click"
    )

    # ── Private channel ─────────────────────────────────────────────────────────
    SIMULATION_URL: str = os.getenv("SIMULATION_URL", "http://localhost:3333")
    CHANNEL_TIMEOUT: float = float(os.getenv("CHANNEL_TIMEOUT_SECONDS", 30))

    # ── Awareness page & owner tokens ───────────────────────────────────────────
    AWARENESS_PAGE_URL: str = os.getenv("AWARENESS_PAGE_URL", "http://localhost:3000")
    SECRET_KEY: str = os.getenv("SECRET_KEY", "change-me")
    TOKEN_MAX_AGE: int = int(os.getenv("TOKEN_MAX_AGE_SECONDS", 86400))

    # ── Logging ─────────────────────────────────────────────────────────────────
    ERROR_LOG_PATH: str = os.getenv("ERROR_LOG_PATH", "error_log.txt")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def DEV_MODE(self) -> bool:
        # read on every access so tests and operators can flip it at runtime
        return _flag("DEV_MODE")


# Instantiate a single settings object to import elsewhere
settings = Settings()
