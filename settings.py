"""
Centralized settings module for the contract dashboard backend.
Single source of truth for all configuration values, read once at import.
"""

import os
from typing import List, Optional

from pydantic import BaseModel


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


def _env_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return float(raw)


class OllamaConfig(BaseModel):
    """Explicit backend configuration handed to the extraction client."""
    base_url: str = "http://localhost:11434"
    model: str = "gpt-oss:120b"
    temperature: float = 0.1
    timeout: Optional[float] = None  # None: transport default, no deadline
    accepts_binary: bool = False     # vision-capable model, takes base64 payloads

    @property
    def generate_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/api/generate"


class ContractDashSettings:
    """Centralized configuration for the contract dashboard."""

    # Extraction backend (Ollama)
    OLLAMA_URL: str = os.getenv("OLLAMA_URL", "http://localhost:11434")
    OLLAMA_MODEL: str = os.getenv("OLLAMA_MODEL", "gpt-oss:120b")
    LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.1"))
    LLM_TIMEOUT_SECONDS: Optional[float] = _env_float("LLM_TIMEOUT_SECONDS")
    LLM_ACCEPTS_BINARY: bool = _env_bool("LLM_ACCEPTS_BINARY", "false")

    # Optional hardening: 0 keeps the single-attempt behaviour
    LLM_MAX_RETRIES: int = int(os.getenv("LLM_MAX_RETRIES", "0"))
    LLM_RETRY_BASE_DELAY: float = float(os.getenv("LLM_RETRY_BASE_DELAY", "1.0"))

    # Normalization
    CD_EXPIRING_HORIZON_DAYS: int = int(os.getenv("CD_EXPIRING_HORIZON_DAYS", "90"))
    CD_DEFAULT_CURRENCY: str = os.getenv("CD_DEFAULT_CURRENCY", "EUR")

    # Logging / API
    CD_LOG_LEVEL: str = os.getenv("CD_LOG_LEVEL", "ERROR")
    CD_SEED_ON_STARTUP: bool = _env_bool("CD_SEED_ON_STARTUP", "true")
    CD_CORS_ORIGINS: List[str] = [
        o.strip() for o in os.getenv("CD_CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()
    ]

    @classmethod
    def ollama_config(cls) -> OllamaConfig:
        """
        Build the backend configuration struct from the environment values.

        Returns:
            OllamaConfig: Configuration to pass into the extraction client
        """
        return OllamaConfig(
            base_url=cls.OLLAMA_URL,
            model=cls.OLLAMA_MODEL,
            temperature=cls.LLM_TEMPERATURE,
            timeout=cls.LLM_TIMEOUT_SECONDS,
            accepts_binary=cls.LLM_ACCEPTS_BINARY,
        )

# Create singleton instance
settings = ContractDashSettings()
