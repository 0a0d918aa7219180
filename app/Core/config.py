from __future__ import annotations

import os
from functools import lru_cache
from dotenv import load_dotenv, find_dotenv

_env_path = find_dotenv(".env") or ".env"
load_dotenv(_env_path, override=True)


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


class Settings:
    """Central configuration (env driven)."""

    def __init__(self) -> None:
        # Judge0 / execution service
        self.judge0_api_url: str = os.getenv("JUDGE0_BASE_URL") or os.getenv("JUDGE0_URL", "http://localhost:2358")
        self.judge0_api_key: str = os.getenv("JUDGE0_KEY", "")
        self.judge0_host: str = os.getenv("JUDGE0_HOST", "")
        self.judge0_timeout_s: float = _env_float("JUDGE0_TIMEOUT_S", 10.0)
        # Poller limits: per test case wait is poll interval * max attempts
        self.judge0_poll_interval_s: float = _env_float("JUDGE0_POLL_INTERVAL_S", 1.0)
        self.judge0_max_poll_attempts: int = max(1, _env_int("JUDGE0_MAX_POLL_ATTEMPTS", 10))
        self.judge0_case_concurrency: int = max(1, _env_int("JUDGE0_CASE_CONCURRENCY", 4))
        self.compile_request_deadline_s: float = _env_float("COMPILE_REQUEST_DEADLINE_S", 60.0)
        # Final submission
        self.rescore_code_on_submit: bool = os.getenv("RESCORE_CODE_ON_SUBMIT", "false").lower() == "true"
        # Question store
        self.question_store: str = os.getenv("QUESTION_STORE", "supabase").strip().lower()
        raw_url = os.getenv("SUPABASE_URL", "")
        self.supabase_url: str = raw_url.rstrip("/")
        self.supabase_anon_key: str = os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY", "")
        self.supabase_key: str = self.supabase_anon_key  # alias
        self.supabase_tests_table: str = os.getenv("SUPABASE_TESTS_TABLE", "tests")
        self.supabase_assignments_table: str = os.getenv("SUPABASE_ASSIGNMENTS_TABLE", "assignments")
        # App meta
        self.app_name: str = "Assessment Runner"
        self.debug: bool = os.getenv("DEBUG", "False").lower() == "true"

    @property
    def per_case_timeout_s(self) -> float:
        return self.judge0_poll_interval_s * self.judge0_max_poll_attempts


@lru_cache()
def get_settings() -> Settings:
    return Settings()
