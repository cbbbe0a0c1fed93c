import os

from .common import *  # noqa: F401,F403
from .common import env_flag

ENV_NAME = "development"

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", "dev-access-secret")
JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "dev-refresh-secret")

DEBUG = True
COOKIE_SECURE = env_flag("COOKIE_SECURE", "0")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin12345")
