import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "org_hierarchy_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

# Org chart editor
EDITOR_ROLES = tuple(r.strip() for r in os.getenv("EDITOR_ROLES", "admin,hr,manager").split(",") if r.strip())
DEFAULT_CASCADE_POLICY = os.getenv("DEFAULT_CASCADE_POLICY", "promote-children")
PRESERVE_COLLAPSE_ON_RELOAD = bool(int(os.getenv("PRESERVE_COLLAPSE_ON_RELOAD", "0")))
MAX_EDITOR_SESSIONS = int(os.getenv("MAX_EDITOR_SESSIONS", "200"))
