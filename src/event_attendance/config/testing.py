import os

from .base import *  # noqa: F401,F403

SECRET_KEY = "testing-secret-key-for-hs256-tokens-0001"

DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
START_SCHEDULER = False
