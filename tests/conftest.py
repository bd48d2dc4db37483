"""Test configuration shared by every test module."""

import os
from pathlib import Path

# Must be set before minimal_api loads its configuration
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("APP_CONFIG_FILE", str(Path(__file__).parent.parent / "config.yaml"))
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("DATABASE_CREATE_TABLES", "false")
os.environ.setdefault("JWT_SECRET", "test-signing-secret-that-is-long-enough-1234")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from tests.fixtures import *  # noqa: E402,F401,F403
