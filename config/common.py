"""Settings shared by every environment; each env module overrides what differs."""

import os


def env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_hub"),
}

JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_MINUTES = int(os.getenv("ACCESS_TOKEN_MINUTES", "15"))
REFRESH_TOKEN_DAYS = int(os.getenv("REFRESH_TOKEN_DAYS", "7"))

SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
SMTP_USE_TLS = env_flag("SMTP_USE_TLS", "1")
MAIL_FROM = os.getenv("MAIL_FROM", "no-reply@hrhub.com")
WEBSITE_URL = os.getenv("WEBSITE_URL", "http://localhost:3000")

SSO_AUTO_PROVISION = env_flag("SSO_AUTO_PROVISION", "1")
SSO_PROVIDER_ID = int(os.getenv("SSO_PROVIDER_ID", "1"))
DEFAULT_COMPANY_ID = int(os.getenv("DEFAULT_COMPANY_ID", "1"))

# Bootstrap admin, created by AUTO_INIT_DB when the users table is empty
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@hrhub.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
