# entrypoints/cli.py
import argparse
import logging
from typing import List, Optional

from ollama_assistant.core.domain.errors import AssistantError, InferenceError
from ollama_assistant.infrastructure.di.container import Container, create_container

logger = logging.getLogger(__name__)

EXIT_WORDS = ("exit", "quit", "bye")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Chat with a local Ollama model about your workspace')
    parser.add_argument('file', nargs='?', help='Workspace file to keep as context for plain chat')
    parser.add_argument('--workspace', help='Workspace root (default: current directory)')
    parser.add_argument('--endpoint', help='Ollama endpoint (default: http://localhost:11434)')
    parser.add_argument('--model', help='Model to start with')
    parser.add_argument('--timeout', type=float, help='Seconds to wait for the inference server')
    parser.add_argument('--workspace-context', action='store_true',
                        help='Prefix plain chat messages with the workspace tree')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')
    return parser


def main(argv: Optional[List[str]] = None, container: Optional[Container] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    if container is None:
        container = create_container({
            "endpoint": args.endpoint,
            "default_model": args.model,
            "request_timeout": args.timeout,
            "workspace_root": args.workspace,
        })

    output_port = container.chat_output()
    inference_client = container.inference_client()
    workspace = container.workspace()
    conversation_uc = container.conversation_uc()

    try:
        models = inference_client.list_models()
    except InferenceError as e:
        output_port.display_error(f"Error fetching models: {e}")
        return 1

    output_port.display_message(f"Connected. {len(models)} model(s) available, using {conversation_uc.model}.")
    output_port.display_message("Type @help for commands, 'exit' to leave.")

    try:
        if args.file:
            conversation_uc.set_file_context(args.file, workspace.read_file(args.file))
            output_port.display_message(f"\nUsing {args.file} as context...\n")
        if args.workspace_context:
            conversation_uc.refresh_workspace_context(workspace)
    except AssistantError as e:
        output_port.display_error(str(e))
        return 1

    while True:
        try:
            user_input = output_port.get_user_input("\nYou: ")
        except (EOFError, KeyboardInterrupt):
            output_port.display_message("Goodbye!")
            break

        text = user_input.strip()
        if not text:
            continue
        if text.lower() in EXIT_WORDS:
            output_port.display_message("Goodbye!")
            break

        try:
            response = conversation_uc.handle_input(text)
        except InferenceError as e:
            output_port.display_error(str(e))
            continue
        output_port.display_message(f"\nAssistant: {response}")

    return 0


if __name__ == '__main__':
    raise SystemExit(main())
