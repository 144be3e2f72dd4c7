"""pytest configuration for the shared_app suite."""

from __future__ import annotations

import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# The suite-wide app writes its SQLite file here; the session teardown removes it.
os.environ.setdefault("SHARED_APP_DB_FILENAME", "shared_app_suite.db")
os.environ.pop("DATABASE_URL", None)
os.environ.pop("LOCAL_DATABASE_URI", None)

pytest_plugins = ["shared_app.plugin", "pytester"]
