import os
from dotenv import load_dotenv

# Load .env
load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./chatroom.db")
DATABASE_ECHO = _flag("DATABASE_ECHO", "false")

# Liveness: how often the sweeper runs and how long a participant may stay silent
SWEEP_INTERVAL_SECONDS = float(os.getenv("SWEEP_INTERVAL_SECONDS", "10"))
PARTICIPANT_TTL_SECONDS = float(os.getenv("PARTICIPANT_TTL_SECONDS", "10"))

RESET_PARTICIPANTS_ON_STARTUP = _flag("RESET_PARTICIPANTS_ON_STARTUP", "true")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5000"))
