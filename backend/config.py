"""
Runtime configuration. Values come from the environment, with a .env file in
the backend root loaded automatically via python-dotenv:

ANTHROPIC_API_KEY=your_real_key_here
CLAUDE_MODEL=claude-3-5-sonnet-latest
SEO_DB_PATH=/var/lib/seo-analyzer/reports.db
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env")

ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", "").strip()
CLAUDE_MODEL = os.getenv("CLAUDE_MODEL", "").strip() or "claude-3-5-sonnet-latest"
CLAUDE_TEMPERATURE = float(os.getenv("CLAUDE_TEMPERATURE", "0.3"))
CLAUDE_MAX_TOKENS = int(os.getenv("CLAUDE_MAX_TOKENS", "1500"))
CLAUDE_TIMEOUT_SECONDS = float(os.getenv("CLAUDE_TIMEOUT_SECONDS", "60"))

FETCH_TIMEOUT_SECONDS = float(os.getenv("FETCH_TIMEOUT_SECONDS", "10"))

# How many meta tags (in document order) are shown to the model.
META_TAG_LIMIT = int(os.getenv("META_TAG_LIMIT", "10"))

RATE_LIMIT_WINDOW_SECONDS = float(os.getenv("RATE_LIMIT_WINDOW_SECONDS", str(15 * 60)))
RATE_LIMIT_MAX_REQUESTS = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "5"))

DB_PATH = Path(os.getenv("SEO_DB_PATH", "").strip() or Path(__file__).parent / "seo_analyzer.db")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"
