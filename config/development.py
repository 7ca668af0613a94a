import os

from .config import MAX_UPLOAD_MB, db_config_from_env, env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = db_config_from_env(default_password="")

DEBUG = env_flag("DEBUG", "1")
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
# Optional: also seed lookup data and the admin account on startup
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
