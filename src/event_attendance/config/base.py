"""Settings shared by every environment; environment modules override them."""

import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "event_attendance"),
    "connection_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "10")),
}

# Empty host disables email notifications.
SMTP_CONFIG = {
    "host": os.getenv("EMAIL_HOST", ""),
    "port": int(os.getenv("EMAIL_PORT", "587")),
    "user": os.getenv("EMAIL_USER", ""),
    "password": os.getenv("EMAIL_PASSWORD", ""),
    "sender": os.getenv("EMAIL_FROM", "noreply@attendance-monitoring.com"),
    "use_tls": bool(int(os.getenv("EMAIL_USE_TLS", "1"))),
    "timeout": int(os.getenv("EMAIL_TIMEOUT", "10")),
}

SWEEP_INTERVAL_SECONDS = int(os.getenv("SWEEP_INTERVAL_SECONDS", "60"))
START_SCHEDULER = bool(int(os.getenv("START_SCHEDULER", "1")))

EXPORT_DIR = os.getenv("EXPORT_DIR", "exports")
EXPORT_MAX_AGE_HOURS = int(os.getenv("EXPORT_MAX_AGE_HOURS", "24"))

TOKEN_TTL_HOURS = int(os.getenv("TOKEN_TTL_HOURS", "24"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
