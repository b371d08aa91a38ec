import logging
import os

from dotenv import load_dotenv

load_dotenv()

# Database (Render provides DATABASE_URL; local runs fall back to SQLite)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./attendance.db")

# Cookie-session secret for the login middleware
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")

# Session QR tokens
TOKEN_SECRET = os.getenv("TOKEN_SECRET", "qr-session-token-secret-change-me-in-production")
TOKEN_ALGORITHM = os.getenv("TOKEN_ALGORITHM", "HS256")
SESSION_TTL_MINUTES = int(os.getenv("SESSION_TTL_MINUTES", "15"))

# Geofence policy, not environment-tunable
GEOFENCE_RADIUS_METERS = 100.0

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def configure_logging(level=None):
    logging.basicConfig(
        level=level or LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
