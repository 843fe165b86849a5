import os

from dotenv import load_dotenv

load_dotenv()

# Database
DATABASE_URL = os.environ.get("DATABASE_URL")
DB_ECHO = os.getenv("DB_ECHO", "false").lower() == "true"

# JWT
JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", "default_access_secret")
JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "default_refresh_secret")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
REFRESH_TOKEN_EXPIRE_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))
SECURE_COOKIE = os.getenv("SECURE_COOKIE", "false").lower() == "true"

# SMTP
SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", "user")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "password")
MAIL_FROM = os.getenv("MAIL_FROM", SMTP_USER)

# Redis
REDIS_HOST = os.environ.get("REDIS_HOST", "localhost")
REDIS_PORT = int(os.environ.get("REDIS_PORT", "6379"))
REDIS_DB_CACHE = int(os.environ.get("REDIS_DB_CACHE", "0"))
PASSWORD_RESET_TTL = int(os.getenv("PASSWORD_RESET_TTL", "600"))  # seconds

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if origin.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
