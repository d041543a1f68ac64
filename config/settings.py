from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


load_dotenv()


def _timeout_from_env(raw: Optional[str]) -> Optional[float]:
    if not raw:
        return None
    value = float(raw)
    return value if value > 0 else None


class Settings:
    """Application settings loaded from environment variables.

    Keep all service and collaborator config centralized here. Values are
    read when an instance is created, so ``get_settings.cache_clear()``
    picks up a changed environment.
    """

    def __init__(self) -> None:
        self.host: str = os.getenv("HOST", "0.0.0.0")
        self.port: int = int(os.getenv("PORT", "8000"))
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")
        self.summarizer_url: str = os.getenv(
            "OLLAMA_URL", "http://localhost:11434/api/generate"
        )
        self.summarizer_model: str = os.getenv("OLLAMA_MODEL", "llama3.2")
        self.summarizer_timeout: Optional[float] = _timeout_from_env(
            os.getenv("OLLAMA_TIMEOUT", "60")
        )
        self.id_strategy: str = os.getenv("STUDENT_ID_STRATEGY", "counter")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
