import sys
import os

import pytest

# Ensure repo root on sys.path for imports like `app...`
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# Keep the app off the network-backed question store during tests
os.environ.setdefault("QUESTION_STORE", "memory")
os.environ.setdefault("READ_CACHE_DISABLED", "true")

from app.Core.config import Settings  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def make_settings():
    def _make(**overrides):
        settings = Settings()
        settings.judge0_api_url = "http://judge0.test"
        settings.judge0_api_key = ""
        settings.judge0_host = ""
        settings.judge0_poll_interval_s = 0.0
        settings.judge0_max_poll_attempts = 10
        settings.judge0_case_concurrency = 4
        settings.compile_request_deadline_s = 60.0
        settings.rescore_code_on_submit = False
        settings.question_store = "memory"
        for key, value in overrides.items():
            setattr(settings, key, value)
        return settings

    return _make
