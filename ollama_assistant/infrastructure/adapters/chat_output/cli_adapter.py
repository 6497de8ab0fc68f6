# infrastructure/adapters/chat_output/cli_adapter.py
import sys

from ollama_assistant.core.ports.chat_output_port import ChatOutputPort


class CLIChatAdapter(ChatOutputPort):
    def display_message(self, message: str):
        print(message)

    def display_error(self, message: str):
        print(f"Error: {message}", file=sys.stderr)

    def get_user_input(self, prompt: str) -> str:
        return input(prompt)
