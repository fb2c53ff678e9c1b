from __future__ import annotations

import os
from functools import lru_cache
from dotenv import load_dotenv, find_dotenv

_env_path = find_dotenv(".env") or ".env"
load_dotenv(_env_path, override=False)

_DEFAULT_DEPARTMENTS = "MECH,CSE,CIVIL,EC,AIML,CD"


def _split_csv(raw: str) -> list[str]:
    return [part.strip().upper() for part in raw.split(",") if part.strip()]


class Settings:
    """Central configuration (env driven)."""

    def __init__(self) -> None:
        # Supabase
        raw_url = os.getenv("SUPABASE_URL", "")
        self.supabase_url: str = raw_url.rstrip("/")
        self.supabase_anon_key: str = os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY", "")
        self.supabase_key: str = self.supabase_anon_key  # alias
        self.supabase_service_role_key: str = (
            os.getenv("SUPABASE_SERVICE_ROLE_KEY")
            or os.getenv("SUPABASE_SERVICE_KEY")
            or ""
        )
        # Database (migrations only; runtime goes through the REST API)
        self.database_url: str = os.getenv("DATABASE_URL", "")
        # Entity store
        self.query_timeout: float = float(os.getenv("SUPABASE_QUERY_TIMEOUT", "5"))
        # Workflow
        self.verify_max_attempts: int = max(1, int(os.getenv("VERIFY_MAX_ATTEMPTS", "3")))
        self.comment_max_length: int = int(os.getenv("COMMENT_MAX_LENGTH", "500"))
        self.departments: list[str] = _split_csv(os.getenv("NODEX_DEPARTMENTS", _DEFAULT_DEPARTMENTS))
        self.min_semester: int = 1
        self.max_semester: int = 8
        self.batch_pattern: str = r"^\d{4}-\d{2}$"
        # App meta
        self.app_name: str = "Nodex Backend"
        self.debug: bool = os.getenv("DEBUG", "False").lower() == "true"
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.allow_origins: list[str] = [
            o.strip().rstrip("/")
            for o in os.getenv("ALLOW_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")
            if o.strip()
        ]

    def get_database_url(self) -> str:
        return self.database_url


@lru_cache()
def get_settings() -> Settings:
    return Settings()
