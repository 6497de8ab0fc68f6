"""Pytest configuration and shared fixtures."""

from typing import Dict, List

import pytest

from ollama_assistant.application.use_cases.command_dispatcher import CommandDispatcher
from ollama_assistant.application.use_cases.conversation import ConversationUseCase
from ollama_assistant.core.domain.models import ModelDescriptor, SessionContext
from ollama_assistant.core.ports.chat_output_port import ChatOutputPort
from ollama_assistant.core.ports.inference_client_port import InferenceClientPort
from ollama_assistant.infrastructure.adapters.inspectors.heuristic_inspector import HeuristicCodeInspector
from ollama_assistant.infrastructure.adapters.workspace.local_workspace_adapter import LocalWorkspaceAdapter

APP_JS = """// Entry point for the demo app
import { useState } from 'react'
import lodash from 'lodash'

function render() {
  const count = useState(0)
  return count
}
"""

PACKAGE_JSON = """{
  "name": "demo",
  "dependencies": {"react": "^18.2.0"},
  "devDependencies": {"jest": "^29.0.0"}
}
"""


class FakeInferenceClient(InferenceClientPort):
    """Records every request instead of calling a server."""

    def __init__(self, model_names=("a", "b"), reply="Hello from the model"):
        self.models = [ModelDescriptor(name=name, size=1000, modified_at="2024-01-01T00:00:00Z")
                       for name in model_names]
        self.reply = reply
        self.chat_calls: List[tuple] = []
        self.list_calls = 0
        self.chat_error = None
        self.list_error = None

    def chat(self, model: str, messages: List[Dict[str, str]]) -> str:
        self.chat_calls.append((model, [dict(m) for m in messages]))
        if self.chat_error:
            raise self.chat_error
        return self.reply

    def list_models(self) -> List[ModelDescriptor]:
        self.list_calls += 1
        if self.list_error:
            raise self.list_error
        return list(self.models)


class ScriptedOutput(ChatOutputPort):
    """Feeds canned input lines and collects everything displayed."""

    def __init__(self, inputs=()):
        self.inputs = list(inputs)
        self.messages: List[str] = []
        self.errors: List[str] = []

    def display_message(self, message: str):
        self.messages.append(message)

    def display_error(self, message: str):
        self.errors.append(message)

    def get_user_input(self, prompt: str) -> str:
        if not self.inputs:
            raise EOFError
        return self.inputs.pop(0)


@pytest.fixture
def fake_client():
    return FakeInferenceClient()


@pytest.fixture
def workspace_dir(tmp_path):
    """Create a small project tree on disk."""
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "app.js").write_text(APP_JS, encoding="utf-8")
    (tmp_path / "src" / "util.py").write_text("def helper():\n    return 42\n", encoding="utf-8")
    (tmp_path / "package.json").write_text(PACKAGE_JSON, encoding="utf-8")
    (tmp_path / "node_modules" / "react").mkdir(parents=True)
    (tmp_path / "node_modules" / "react" / "index.js").write_text("module.exports = {}\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def workspace(workspace_dir):
    return LocalWorkspaceAdapter(str(workspace_dir))


@pytest.fixture
def closed_workspace():
    return LocalWorkspaceAdapter(None)


@pytest.fixture
def inspector():
    return HeuristicCodeInspector()


@pytest.fixture
def dispatcher(fake_client, workspace, inspector):
    return CommandDispatcher(fake_client, workspace, inspector)


@pytest.fixture
def session():
    return SessionContext(model="a")


@pytest.fixture
def conversation(fake_client, dispatcher, session):
    return ConversationUseCase(fake_client, dispatcher, session)
