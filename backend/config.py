import os
from dotenv import load_dotenv

load_dotenv()

# --- JWT Configuration ---
JWT_SECRET = os.getenv("JWT_SECRET", "change-this-secret-key")
JWT_ALGORITHM = "HS256"
JWT_EXPIRY_HOURS = int(os.getenv("JWT_EXPIRY_HOURS", "720"))  # 30 days

# --- Database ---
# Default to local SQLite, but prefer environment variable (for hosted Postgres)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/habitflow.db")

# Fix for common SQLAlchemy issues with postgres:// vs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# --- Activity log / feed ---
ACTIVITY_LOG_LIMIT = int(os.getenv("ACTIVITY_LOG_LIMIT", "50"))
FEED_LIMIT = int(os.getenv("FEED_LIMIT", "30"))

# --- Notifications ---
STREAK_MILESTONES = [7, 14, 21, 30, 60, 90, 100, 365]
GOAL_NEAR_THRESHOLD = float(os.getenv("GOAL_NEAR_THRESHOLD", "0.75"))

# --- App ---
APP_NAME = os.getenv("APP_NAME", "HabitFlow")
