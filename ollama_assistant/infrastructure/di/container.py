# infrastructure/di/container.py
import os
from typing import Any, Dict, Optional

from dependency_injector import containers, providers

from ollama_assistant.application.use_cases.command_dispatcher import CommandDispatcher
from ollama_assistant.application.use_cases.conversation import ConversationUseCase
from ollama_assistant.core.domain.models import AssistantConfig, SessionContext
from ollama_assistant.infrastructure.adapters.chat_output.cli_adapter import CLIChatAdapter
from ollama_assistant.infrastructure.adapters.inference.ollama_adapter import OllamaClientAdapter
from ollama_assistant.infrastructure.adapters.inspectors.heuristic_inspector import HeuristicCodeInspector
from ollama_assistant.infrastructure.adapters.workspace.local_workspace_adapter import LocalWorkspaceAdapter
from ollama_assistant.infrastructure.session.session_manager import SessionManager

DEFAULT_CONFIG: Dict[str, Any] = {
    "endpoint": "http://localhost:11434",
    "default_model": "llama2-uncensored",
    "request_timeout": 120.0,
    "workspace_root": None,
    "exclude_globs": [],
    "long_function_lines": 20,
    "function_complexity_threshold": 5,
    "file_complexity_threshold": 10,
    "duplicate_window_size": 5,
    "session_timeout": 3600,
}


class Container(containers.DeclarativeContainer):
    config = providers.Configuration()

    assistant_config = providers.Factory(
        AssistantConfig,
        endpoint=config.endpoint,
        default_model=config.default_model,
        request_timeout=config.request_timeout,
        exclude_globs=config.exclude_globs,
        long_function_lines=config.long_function_lines,
        function_complexity_threshold=config.function_complexity_threshold,
        file_complexity_threshold=config.file_complexity_threshold,
        duplicate_window_size=config.duplicate_window_size,
    )

    # Adapters
    inference_client = providers.Singleton(
        OllamaClientAdapter,
        endpoint=config.endpoint,
        timeout=config.request_timeout
    )

    workspace = providers.Singleton(
        LocalWorkspaceAdapter,
        root=config.workspace_root,
        exclude_globs=config.exclude_globs
    )

    inspector = providers.Factory(
        HeuristicCodeInspector,
        long_function_lines=config.long_function_lines,
        function_complexity_threshold=config.function_complexity_threshold,
        window_size=config.duplicate_window_size
    )

    chat_output = providers.Factory(CLIChatAdapter)

    session_manager = providers.Singleton(SessionManager, session_timeout=config.session_timeout)

    # Use Cases
    session = providers.Factory(SessionContext, model=config.default_model)

    dispatcher = providers.Factory(
        CommandDispatcher,
        inference_client=inference_client,
        workspace=workspace,
        inspector=inspector,
        config=assistant_config
    )

    conversation_uc = providers.Factory(
        ConversationUseCase,
        inference_client=inference_client,
        dispatcher=dispatcher,
        session=session
    )


def create_container(overrides: Optional[Dict[str, Any]] = None) -> Container:
    """Build a container from defaults, then OLLAMA_* environment variables, then explicit overrides"""
    container = Container()
    container.config.from_dict(DEFAULT_CONFIG)
    container.config.endpoint.from_env("OLLAMA_ENDPOINT", default=DEFAULT_CONFIG["endpoint"])
    container.config.default_model.from_env("OLLAMA_MODEL", default=DEFAULT_CONFIG["default_model"])
    container.config.request_timeout.from_env(
        "OLLAMA_TIMEOUT", default=DEFAULT_CONFIG["request_timeout"], as_=float
    )
    container.config.workspace_root.from_env("OLLAMA_WORKSPACE", default=os.getcwd())

    if overrides:
        container.config.from_dict({key: value for key, value in overrides.items() if value is not None})
    return container
