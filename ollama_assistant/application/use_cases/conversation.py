# application/use_cases/conversation.py
import logging
from typing import Any, Dict, List, Optional

from ollama_assistant.application.commands.registry import SIGIL
from ollama_assistant.application.use_cases.command_dispatcher import CommandDispatcher
from ollama_assistant.core.domain.models import ASSISTANT, USER, FileContext, SessionContext, Turn
from ollama_assistant.core.ports.inference_client_port import InferenceClientPort
from ollama_assistant.core.ports.workspace_port import WorkspacePort

logger = logging.getLogger(__name__)


class ConversationUseCase:
    def __init__(self,
                 inference_client: InferenceClientPort,
                 dispatcher: CommandDispatcher,
                 session: SessionContext):
        self.inference_client = inference_client
        self.dispatcher = dispatcher
        self.session = session

    @property
    def model(self) -> str:
        return self.session.model

    def handle_input(self, text: str) -> str:
        """Route `@` commands to the dispatcher and everything else to the model"""
        if text.strip().startswith(SIGIL):
            return self.run_command(text)
        return self.handle_message(text)

    def run_command(self, command: str) -> str:
        response = self.dispatcher.handle_command(self.session, command)
        self.session.add_turn(ASSISTANT, response)
        return response

    def handle_message(self, user_message: str) -> str:
        """
        Send a plain chat message with the whole transcript and return the reply.

        Workspace context is applied first and file context second, so when
        both are set the file context wins. Inference failures propagate to
        the caller; the user turn stays in the transcript.
        """
        message_content = user_message
        if self.session.workspace_context:
            message_content = f"Workspace Context:\n{self.session.workspace_context}\n\nUser Question: {user_message}"
        if self.session.file_context:
            file_context = self.session.file_context
            message_content = (
                f"Current File Context ({file_context.path}):\n{file_context.content}\n\n"
                f"User Question: {user_message}"
            )

        self.session.add_turn(USER, message_content)

        response = self.inference_client.chat(self.session.model, self.session.messages())

        self.session.add_turn(ASSISTANT, response)
        return response

    def set_model(self, model: str):
        """Switch model; the accumulated history belongs to the old one"""
        self.session.set_model(model)
        self.session.clear_history()

    def clear_history(self):
        self.session.clear_history()

    def get_history(self) -> List[Turn]:
        return self.session.history

    def set_workspace_context(self, context: str):
        self.session.workspace_context = context

    def refresh_workspace_context(self, workspace: WorkspacePort) -> str:
        context = workspace.build_tree() if workspace.is_open else ""
        self.session.workspace_context = context
        return context

    def set_file_context(self, path: str, content: str):
        self.session.file_context = FileContext(path=path, content=content)

    def clear_context(self):
        self.session.workspace_context = ""
        self.session.file_context = None

    def save_state(self) -> Dict[str, Any]:
        return self.session.to_state()

    def restore_state(self, state: Optional[Dict[str, Any]]):
        if state:
            self.session.load_state(state)
            logger.debug("Restored %d turns for model %s", len(self.session.history), self.session.model)
