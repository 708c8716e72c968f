import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_portal"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# "Remember me" logins keep the session cookie this many days.
SESSION_DAYS = int(os.getenv("SESSION_DAYS", "7"))

# Apply database/schema.sql on startup (CREATE TABLE IF NOT EXISTS, safe to repeat)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Also load database/seed.sql and the demo logins
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
