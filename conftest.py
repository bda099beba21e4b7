"""
Pytest configuration for the NGO portal tests.
Sets up the Python path and the test environment before any settings load.
"""

import os
import sys
from pathlib import Path

# Add the project root to Python path for all tests
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

# Set up test environment variables
os.environ.setdefault("JWT_SECRET_KEY", "test-signing-key-for-the-ngo-portal-suite")
os.environ.setdefault("BCRYPT_ROUNDS", "10")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("WS_HEARTBEAT_INTERVAL_SECONDS", "3600")
os.environ.setdefault("ADMIN_EMAIL", "admin@example.org")
os.environ.setdefault("ADMIN_PASSWORD", "admin-password-123")
