import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
JWT_SECRET = os.getenv("JWT_SECRET", "please-set-JWT_SECRET")
JWT_ALGORITHM = "HS256"

STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")
STORE_TIMEOUT_SECONDS = int(os.getenv("STORE_TIMEOUT_SECONDS", "5"))

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "campus_attendance"),
}

DEFAULT_SESSION_MINUTES = int(os.getenv("DEFAULT_SESSION_MINUTES", "30"))
MIN_SESSION_MINUTES = 1
MAX_SESSION_MINUTES = 180

QR_BOX_SIZE = 10
QR_BORDER = 2

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = False
