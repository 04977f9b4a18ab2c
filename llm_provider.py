import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

import requests

from errors import BackendTransportError, ContractImportError, EmptyResponseError
from settings import OllamaConfig

log = logging.getLogger("contractdash.llm")


class LLMProvider(ABC):
    # Backend this provider talks to; None for providers without one
    config: Optional[OllamaConfig] = None

    @property
    def accepts_binary(self) -> bool:
        return False

    @abstractmethod
    def complete(self, prompt: str, images: Optional[List[str]] = None) -> str:
        """Return the model's raw text for one prompt. Blocks until the full response is in."""
        ...


class OllamaProvider(LLMProvider):
    """
    Single request/response exchange with Ollama's ``/api/generate``.

    Streaming is disabled and temperature pinned low, so one POST yields the
    complete answer in the ``response`` field.
    """

    def __init__(self, config: Optional[OllamaConfig] = None):
        self.config = config or OllamaConfig()

    @property
    def accepts_binary(self) -> bool:
        return self.config.accepts_binary

    def build_payload(self, prompt: str, images: Optional[List[str]] = None) -> dict:
        payload = {
            "model": self.config.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self.config.temperature,
            },
        }
        if images:
            payload["images"] = list(images)
        return payload

    def complete(self, prompt: str, images: Optional[List[str]] = None) -> str:
        """
        Send the prompt and return the raw model text.

        Args:
            prompt: Fully rendered extraction prompt
            images: Optional base64 payloads for vision-capable models

        Returns:
            Raw text response from the LLM

        Raises:
            BackendTransportError: connection failure or non-2xx status
            EmptyResponseError: success status but no usable text
        """
        url = self.config.generate_url
        log.info(f"Calling Ollama at {url} (model={self.config.model}, prompt={len(prompt)} chars)")

        try:
            response = requests.post(
                url,
                json=self.build_payload(prompt, images),
                timeout=self.config.timeout,
            )
        except requests.Timeout as e:
            raise BackendTransportError(
                f"Ollama hat nicht rechtzeitig geantwortet ({self.config.timeout}s): {e}"
            ) from e
        except requests.RequestException as e:
            raise BackendTransportError(f"Ollama ist unter {url} nicht erreichbar: {e}") from e

        if not response.ok:
            raise BackendTransportError(
                f"Ollama API Fehler: {response.status_code} {response.reason}",
                status_code=response.status_code,
                reason=response.reason,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise BackendTransportError(
                f"Ollama lieferte kein gültiges JSON: {e}",
                status_code=response.status_code,
                reason=response.reason,
            ) from e

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str) or not text.strip():
            raise EmptyResponseError("Keine Antwort von Ollama erhalten.")

        log.info(f"Ollama response received ({len(text)} chars)")
        return text


class RetryingProvider(LLMProvider):
    """
    Bounded retry with exponential backoff around another provider.

    Only retryable failures (transport, empty response) are retried; the last
    one propagates once the attempts are used up.
    """

    def __init__(
        self,
        inner: LLMProvider,
        max_retries: int = 2,
        base_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.inner = inner
        self.max_retries = max(0, max_retries)
        self.base_delay = base_delay
        self._sleep = sleep

    @property
    def config(self) -> Optional[OllamaConfig]:
        return self.inner.config

    @property
    def accepts_binary(self) -> bool:
        return self.inner.accepts_binary

    def complete(self, prompt: str, images: Optional[List[str]] = None) -> str:
        attempt = 0
        while True:
            try:
                return self.inner.complete(prompt, images=images)
            except ContractImportError as e:
                if not e.retryable or attempt >= self.max_retries:
                    raise
                delay = self.base_delay * (2 ** attempt)
                attempt += 1
                log.warning(f"LLM call failed (attempt {attempt}/{self.max_retries + 1}): {e}; retrying in {delay:.1f}s")
                self._sleep(delay)
