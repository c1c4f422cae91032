"""Configuration loaded from .env"""

import os
from datetime import date
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent.parent / ".env")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Output
OUTPUT_PATH = Path(os.getenv("WRAPPED_OUTPUT_PATH", "wrapped_stats.json"))

# API
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "200"))
FRONTEND_ORIGINS = [
    o.strip() for o in os.getenv("FRONTEND_ORIGINS", "").split(",") if o.strip()
] or ["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:5173"]


def reference_date() -> date:
    """Return the date used as "today" for days-elapsed math.

    WRAPPED_TODAY (YYYY-MM-DD) pins it for reproducible runs.
    """
    pinned: Optional[str] = os.getenv("WRAPPED_TODAY")
    if pinned:
        return date.fromisoformat(pinned.strip())
    return date.today()
