# infrastructure/adapters/inference/ollama_adapter.py
import logging
from typing import Dict, List, Optional

import requests

from ollama_assistant.core.domain.errors import InferenceError, TransportError
from ollama_assistant.core.domain.models import ModelDescriptor
from ollama_assistant.core.ports.inference_client_port import InferenceClientPort

logger = logging.getLogger(__name__)


class OllamaClientAdapter(InferenceClientPort):
    """Talks to an Ollama server over its JSON API. One request per call, never retried."""

    def __init__(self, endpoint: str = "http://localhost:11434", timeout: float = 120.0,
                 session: Optional[requests.Session] = None):
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def chat(self, model: str, messages: List[Dict[str, str]]) -> str:
        payload = {
            "model": model,
            "messages": [{"role": m["role"], "content": m["content"]} for m in messages],
            "stream": False,
        }
        logger.debug("POST /api/chat model=%s messages=%d", model, len(messages))
        data = self._request("POST", "/api/chat", json=payload)

        message = data.get("message") if isinstance(data, dict) else None
        if not isinstance(message, dict) or not isinstance(message.get("content"), str):
            raise InferenceError("Malformed chat response: missing message content")
        return message["content"]

    def list_models(self) -> List[ModelDescriptor]:
        data = self._request("GET", "/api/tags")

        models = data.get("models") if isinstance(data, dict) else None
        if not isinstance(models, list):
            raise InferenceError("Malformed tags response: missing models list")

        return [
            ModelDescriptor(
                name=model.get("name", ""),
                size=model.get("size"),
                modified_at=model.get("modified_at"),
            )
            for model in models
            if isinstance(model, dict)
        ]

    def _request(self, method: str, path: str, **kwargs):
        url = f"{self.endpoint}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error("Request to %s failed: %s", url, e)
            raise TransportError(f"Could not reach inference server at {self.endpoint}: {e}")

        if not response.ok:
            logger.error("Request to %s returned status %s", url, response.status_code)
            raise TransportError(f"HTTP error! status: {response.status_code}", status=response.status_code)

        try:
            return response.json()
        except ValueError:
            raise InferenceError(f"Invalid JSON in response from {url}", status=response.status_code)
