import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
JWT_SECRET = os.getenv("JWT_SECRET", "dev-jwt-secret-change-me-before-deploying")
JWT_ALGORITHM = "HS256"

# "memory" keeps everything in-process; "mysql" uses DB_CONFIG below
STORE_BACKEND = os.getenv("STORE_BACKEND", "memory")
STORE_TIMEOUT_SECONDS = int(os.getenv("STORE_TIMEOUT_SECONDS", "10"))

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

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
DEBUG = True

# If enabled, the documents table is created on startup (CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: seed a demo course, students and enrollments into the store
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
