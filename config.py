"""
Backend settings (database, hotel timezone, auth, rate limiting)
"""
import os

from dotenv import load_dotenv

load_dotenv()


def _build_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        # Heroku/Render hand out postgres:// URLs, SQLAlchemy wants postgresql://
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        return url
    return (
        f"postgresql://{os.getenv('DB_USER')}:{os.getenv('DB_PASSWORD')}"
        f"@{os.getenv('DB_HOST', 'localhost')}:{os.getenv('DB_PORT', '5432')}/{os.getenv('DB_NAME')}"
    )


# Database
DATABASE_URL = _build_database_url()
DB_ECHO = os.getenv("DB_ECHO", "false").lower() == "true"

# Hotel
HOTEL_TIMEZONE = os.getenv("HOTEL_TIMEZONE", "Asia/Manila")
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₱")

# CORS
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]

# Auth (tokens issued by the external session provider)
AUTH_JWT_SECRET = os.getenv("AUTH_JWT_SECRET", "dev-secret-change-me")
AUTH_JWT_ALGORITHM = os.getenv("AUTH_JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# Rate limiting
RATE_LIMIT_DEFAULT = os.getenv("RATE_LIMIT_DEFAULT", "100/minute")
RATE_LIMIT_ADMIN_CHECK = os.getenv("RATE_LIMIT_ADMIN_CHECK", "20/minute")
RATE_LIMIT_STORAGE_URI = os.getenv("REDIS_URL", "memory://")

# Logging
LOG_FILE = os.getenv("LOG_FILE", "hotel_logs.txt")
