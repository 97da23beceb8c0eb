# settings.py
import os
from dotenv import load_dotenv

load_dotenv()

# OpenAI
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_TEMPERATURE = float(os.getenv("OPENAI_TEMPERATURE", "0.45"))

# Storage
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./career.db")
TELEMETRY_DB = os.getenv("TELEMETRY_DB", "telemetry.sqlite3")

# Remote prompt config (optional; built-in prompts are used when unset)
CAREER_CONFIG_URL = os.getenv("CAREER_CONFIG_URL", "").strip()
CAREER_CONFIG_TTL_SECONDS = float(os.getenv("CAREER_CONFIG_TTL_SECONDS", "300"))

# Catalog override
JOB_CATALOG_PATH = os.getenv("JOB_CATALOG_PATH", "").strip()

# App
CHAT_HISTORY_LIMIT = int(os.getenv("CHAT_HISTORY_LIMIT", "12"))
DEBUG = os.getenv("DEBUG", "1").strip() == "1"
