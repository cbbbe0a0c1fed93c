from .common import *  # noqa: F401,F403

ENV_NAME = "testing"

SECRET_KEY = "test-secret"
JWT_ACCESS_SECRET = "test-access-secret"
JWT_REFRESH_SECRET = "test-refresh-secret"

DEBUG = False
TESTING = True
COOKIE_SECURE = False

AUTO_INIT_DB = False
AUTO_SEED_DB = False
SMTP_HOST = ""
