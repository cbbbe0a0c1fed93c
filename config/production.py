import os

from .common import *  # noqa: F401,F403
from .common import env_flag

ENV_NAME = "production"

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", "please-set-JWT_ACCESS_SECRET")
JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "please-set-JWT_REFRESH_SECRET")

DEBUG = False
COOKIE_SECURE = env_flag("COOKIE_SECURE", "1")

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
