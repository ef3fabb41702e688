import os
from dotenv import load_dotenv

load_dotenv()

# --- JWT Configuration ---
JWT_SECRET = os.getenv("JWT_SECRET", "change-this-secret-key")
JWT_ALGORITHM = "HS256"
JWT_EXPIRY_HOURS = 720  # 30 days

# --- Database ---
# Default to local SQLite, any SQLAlchemy URL works
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/habitsync.db")

# Fix for common SQLAlchemy issues with postgres:// vs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- HTTP ---
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# --- Leaderboard ---
LEADERBOARD_DEFAULT_PAGE_SIZE = 20
LEADERBOARD_MAX_PAGE_SIZE = 50

# --- Sync defaults ---
DEFAULT_THEME = "dark"
