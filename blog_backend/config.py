"""Configuration for the blog content API."""

import os
from dotenv import load_dotenv

load_dotenv()

# ============================================================================
# Server Configuration
# ============================================================================

def get_port(env_var: str, default: int) -> int:
    """Get port from environment or return default."""
    try:
        return int(os.getenv(env_var, default))
    except ValueError:
        print(f"Warning: Invalid {env_var}, using default {default}")
        return default


def get_int(env_var: str, default: int) -> int:
    """Get a positive integer from environment or return default."""
    try:
        value = int(os.getenv(env_var, default))
    except ValueError:
        print(f"Warning: Invalid {env_var}, using default {default}")
        return default
    return value if value > 0 else default


# Backend API server port
BACKEND_PORT = get_port("PORT_BACKEND", 5001)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:5174",
    "https://blogs-ivory-five.vercel.app",
]


def get_cors_origins():
    """Allowed CORS origins, from CORS_ORIGINS (comma separated) if set."""
    origins_env = os.getenv("CORS_ORIGINS", "")
    origins = [origin.strip() for origin in origins_env.split(",") if origin.strip()]
    return origins or list(DEFAULT_CORS_ORIGINS)

# ============================================================================
# Pagination
# ============================================================================

DEFAULT_PAGE_LIMIT = get_int("DEFAULT_PAGE_LIMIT", 10)
MAX_PAGE_LIMIT = get_int("MAX_PAGE_LIMIT", 100)

# Posts shown per category on the home digest
HOME_POSTS_PER_CATEGORY = get_int("HOME_POSTS_PER_CATEGORY", 4)

# ============================================================================
# Cache TTLs (seconds)
# ============================================================================

CACHE_TTL_SHORT = get_int("CACHE_TTL_SHORT", 60)
CACHE_TTL_MEDIUM = get_int("CACHE_TTL_MEDIUM", 300)
CACHE_TTL_LONG = get_int("CACHE_TTL_LONG", 3600)
CACHE_TTL_VERY_LONG = get_int("CACHE_TTL_VERY_LONG", 86400)

# ============================================================================
# Accounts
# ============================================================================

# Signing key for access tokens. When unset, main.py generates a per-process key
# and every token stops working on restart.
JWT_SECRET = os.getenv("JWT_SECRET", "")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRY_SECONDS = get_int("JWT_EXPIRY_SECONDS", 86400)
SESSION_TTL = get_int("SESSION_TTL", 86400)
