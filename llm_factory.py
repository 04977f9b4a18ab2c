import os, yaml
from typing import Optional

from llm_provider import LLMProvider, OllamaProvider, RetryingProvider
from settings import OllamaConfig, settings


def load_config(config_path: str = "llm.yaml") -> tuple[OllamaConfig, int]:
    """
    Resolve backend config: defaults < llm.yaml < environment.

    Returns:
        (OllamaConfig, max_retries)
    """
    cfg = {}
    if os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}

    kind = os.getenv("LLM_PROVIDER", cfg.get("provider", "ollama")).lower()
    if kind != "ollama":
        raise ValueError(f"Unknown provider: {kind}")

    base = settings.ollama_config()
    config = OllamaConfig(
        base_url=base.base_url if os.getenv("OLLAMA_URL") else cfg.get("model_url", base.base_url),
        model=base.model if os.getenv("OLLAMA_MODEL") else cfg.get("model_id", base.model),
        temperature=base.temperature if os.getenv("LLM_TEMPERATURE") else cfg.get("temperature", base.temperature),
        timeout=base.timeout if os.getenv("LLM_TIMEOUT_SECONDS") else cfg.get("timeout", base.timeout),
        accepts_binary=base.accepts_binary if os.getenv("LLM_ACCEPTS_BINARY") else cfg.get("accepts_binary", base.accepts_binary),
    )
    max_retries = settings.LLM_MAX_RETRIES if os.getenv("LLM_MAX_RETRIES") else int(cfg.get("max_retries", settings.LLM_MAX_RETRIES))
    return config, max_retries


def load_provider(config_path: str = "llm.yaml", config: Optional[OllamaConfig] = None) -> LLMProvider:
    max_retries = settings.LLM_MAX_RETRIES
    if config is None:
        config, max_retries = load_config(config_path)
    provider: LLMProvider = OllamaProvider(config)
    if max_retries > 0:
        provider = RetryingProvider(provider, max_retries=max_retries, base_delay=settings.LLM_RETRY_BASE_DELAY)
    return provider
