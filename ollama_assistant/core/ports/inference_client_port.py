# core/ports/inference_client_port.py
from abc import ABC, abstractmethod
from typing import Dict, List

from ollama_assistant.core.domain.models import ModelDescriptor


class InferenceClientPort(ABC):
    @abstractmethod
    def chat(self, model: str, messages: List[Dict[str, str]]) -> str:
        pass

    @abstractmethod
    def list_models(self) -> List[ModelDescriptor]:
        pass
