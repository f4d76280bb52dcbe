import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "org_hierarchy_db"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

EDITOR_ROLES = tuple(r.strip() for r in os.getenv("EDITOR_ROLES", "admin,hr").split(",") if r.strip())
DEFAULT_CASCADE_POLICY = os.getenv("DEFAULT_CASCADE_POLICY", "promote-children")
PRESERVE_COLLAPSE_ON_RELOAD = bool(int(os.getenv("PRESERVE_COLLAPSE_ON_RELOAD", "0")))
MAX_EDITOR_SESSIONS = int(os.getenv("MAX_EDITOR_SESSIONS", "200"))
