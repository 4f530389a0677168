"""
Test environment. Runs before any ``autocare`` module is imported so the
module-level engine and settings never point at a real server.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("SEED_DEMO_USERS", "false")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
