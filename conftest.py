"""Root conftest: test environment defaults, applied before any module imports."""
from __future__ import annotations

import os
from pathlib import Path

_env_test = Path(__file__).resolve().parent / ".env.test"
if _env_test.exists():
    for line in _env_test.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, _, value = line.partition("=")
        os.environ.setdefault(key.strip(), value.strip())

# Settings are read at import time; the engine is created lazily on first use.
os.environ.setdefault("POSTGRES_USER", "messenger")
os.environ.setdefault("POSTGRES_PASSWORD", "messenger")
os.environ.setdefault("POSTGRES_DB", "messenger_test")
os.environ.setdefault("JWT_SECRET", "test-secret-that-is-long-enough-for-hs256")
os.environ.setdefault("JWT_VERIFY_MODE", "hs256")
os.environ.setdefault("PUSH_FANOUT", "local")
os.environ.setdefault("BACKFILL_HANDLES_ON_STARTUP", "false")
