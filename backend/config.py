import os
from dotenv import load_dotenv

load_dotenv()

# --- Database ---
# Default to local SQLite, but prefer environment variable (for hosted Postgres)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/habits.db")

# Fix for common SQLAlchemy issues with postgres:// vs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Habit logs ---
COMMENT_MAX_LENGTH = int(os.getenv("COMMENT_MAX_LENGTH", "500"))
NAME_MAX_LENGTH = 120
DESCRIPTION_MAX_LENGTH = 500

# --- Schedule ---
TITLE_MAX_LENGTH = 120
CATEGORY_MAX_LENGTH = 60

# --- Progress classifier ---
# Days between the two newest logs before a good log counts as "back on track"
BACK_ON_TRACK_DAILY_DAYS = int(os.getenv("BACK_ON_TRACK_DAILY_DAYS", "14"))
BACK_ON_TRACK_WEEKLY_DAYS = int(os.getenv("BACK_ON_TRACK_WEEKLY_DAYS", "21"))
BACK_ON_TRACK_MONTHLY_DAYS = int(os.getenv("BACK_ON_TRACK_MONTHLY_DAYS", "60"))
TREND_DELTA_THRESHOLD = float(os.getenv("TREND_DELTA_THRESHOLD", "0.5"))

# --- CORS (comma-separated) ---
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
