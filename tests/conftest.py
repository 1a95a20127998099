"""
Pytest configuration and shared fixtures.
This file ensures the project root is in sys.path for imports.
"""

import os
import sys
from pathlib import Path

import pytest

# Add project root to sys.path so we can import domain, services, etc.
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# Keep the module-level engine off PostgreSQL; tests bind their own SQLite file
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "testing")


@pytest.fixture
def anyio_backend():
    """Async client tests run on asyncio only"""
    return "asyncio"
