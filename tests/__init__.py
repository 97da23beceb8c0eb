import os

# Must be set before any project module is imported.
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-unit-tests-only-0123456789")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("TELEMETRY_DB", ":memory:")
os.environ.setdefault("DEBUG", "0")
os.environ.setdefault("CAREER_CONFIG_URL", "")
