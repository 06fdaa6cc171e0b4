SECRET_KEY = "test-secret"
JWT_SECRET = "test-jwt-secret-for-the-suite-only-0001"
JWT_ALGORITHM = "HS256"

STORE_BACKEND = "memory"
STORE_TIMEOUT_SECONDS = 1

DB_CONFIG = {
    "host": "localhost",
    "port": 3306,
    "user": "root",
    "password": "",
    "database": "campus_attendance_test",
}

DEFAULT_SESSION_MINUTES = 30
MIN_SESSION_MINUTES = 1
MAX_SESSION_MINUTES = 180

QR_BOX_SIZE = 4
QR_BORDER = 1

LOG_LEVEL = "WARNING"
DEBUG = False
TESTING = True

AUTO_INIT_DB = False
AUTO_SEED_DB = False
