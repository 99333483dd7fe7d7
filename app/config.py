import os
import re
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()


def parse_duration(value: str) -> timedelta:
    """Parse durations such as "24h", "30m", "7d" or a bare number of seconds"""
    match = re.fullmatch(r"\s*(\d+)\s*([smhd]?)\s*", str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = int(match.group(1)), match.group(2) or "s"
    return {
        "s": timedelta(seconds=amount),
        "m": timedelta(minutes=amount),
        "h": timedelta(hours=amount),
        "d": timedelta(days=amount),
    }[unit]


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


ENV = os.getenv("ENV", "development")
IS_PRODUCTION = ENV == "production"
PORT = int(os.getenv("PORT", "3001"))

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./detailing.db")
DB_POOL_MIN = int(os.getenv("DB_POOL_MIN", "2"))
DB_POOL_MAX = int(os.getenv("DB_POOL_MAX", "20"))
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))
DB_STATEMENT_TIMEOUT_MS = int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "30000"))
AUTO_MIGRATE = _bool_env("AUTO_MIGRATE", True)

# Auth
JWT_SECRET = os.getenv("JWT_SECRET", "your-secret-key-change-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_IN = parse_duration(os.getenv("JWT_EXPIRES_IN", "24h"))
REFRESH_TOKEN_EXPIRES_IN = parse_duration(os.getenv("REFRESH_TOKEN_EXPIRES_IN", "7d"))
PASSWORD_RESET_EXPIRES_IN = parse_duration(os.getenv("PASSWORD_RESET_EXPIRES_IN", "1h"))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
JWT_ISSUER = "detailing-app"
JWT_AUDIENCE = "detailing-client"

# Rate limiting
RATE_LIMIT_ENABLED = _bool_env("RATE_LIMIT_ENABLED", True)
RATE_LIMIT_WINDOW_SECONDS = int(os.getenv("RATE_LIMIT_WINDOW_MS", str(15 * 60 * 1000))) // 1000
RATE_LIMIT_MAX_REQUESTS = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "100"))

# CORS
if os.getenv("CORS_ORIGIN"):
    CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGIN").split(",") if origin.strip()]
elif IS_PRODUCTION:
    CORS_ORIGINS = ["https://detailingsalonlux.com"]
else:
    CORS_ORIGINS = ["http://localhost:5173", "http://localhost:3000"]
