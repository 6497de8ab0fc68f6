# application/use_cases/command_dispatcher.py
import logging
import re
from typing import Optional

from ollama_assistant.application.commands import reports
from ollama_assistant.application.commands.registry import (
    SIGIL,
    CommandArguments,
    CommandRegistry,
    MatchKind,
    parse_command,
)
from ollama_assistant.core.domain.errors import FormatError, NotFoundError, UnknownCommandError
from ollama_assistant.core.domain.models import (
    USER,
    AssistantConfig,
    CommandArity,
    CommandSpec,
    SessionContext,
)
from ollama_assistant.core.ports.code_inspector_port import CodeInspectorPort
from ollama_assistant.core.ports.inference_client_port import InferenceClientPort
from ollama_assistant.core.ports.workspace_port import WorkspacePort

logger = logging.getLogger(__name__)

NO_WORKSPACE_MESSAGE = "No workspace folder is open."
EDIT_PATTERN = re.compile(r"@edit\s+(\S+)\s+(\d+)\s+(.+)", re.IGNORECASE)
EDIT_FORMAT_MESSAGE = "Error: Invalid edit command format. Use @edit <file> <line> <content>"

UNDERSTAND_PROMPT = """Please analyze and explain this code file in detail:
File path: {path}
Content:
{content}

Please provide:
1. A high-level overview of what this file does
2. Key functions and their purposes
3. Important data structures or patterns used
4. Any notable dependencies or relationships with other files
5. Potential areas for improvement or optimization"""


class CommandDispatcher:
    """
    Resolves `@` commands against a fixed command table and runs them.

    Every call records the raw command as a user turn first. The answer is
    returned as text; recording it as an assistant turn is left to the caller.
    Failures never escape: they come back as an error string.
    """

    def __init__(self,
                 inference_client: InferenceClientPort,
                 workspace: WorkspacePort,
                 inspector: CodeInspectorPort,
                 config: Optional[AssistantConfig] = None):
        self.inference_client = inference_client
        self.workspace = workspace
        self.inspector = inspector
        self.config = config or AssistantConfig()
        self.registry = self._build_registry()

    def _build_registry(self) -> CommandRegistry:
        registry = CommandRegistry()
        exact = MatchKind.EXACT
        prefix = MatchKind.PREFIX

        registry.register(CommandSpec("@help", CommandArity.NONE, "Show this help message", "@help"),
                          exact, self.help)
        registry.register(CommandSpec("@list", CommandArity.NONE, "List available models", "@list"),
                          exact, self.list_models)
        registry.register(CommandSpec("@clear", CommandArity.NONE, "Clear chat history", "@clear"),
                          exact, self.clear)
        registry.register(CommandSpec("@info", CommandArity.NONE, "Show current model information", "@info"),
                          exact, self.info)
        registry.register(CommandSpec("@workspace", CommandArity.QUERY,
                                      "Use workspace as context and answer the query", "@workspace: <query>"),
                          prefix, self.workspace_query, prefix="@workspace")
        registry.register(CommandSpec("@model", CommandArity.QUERY, "Change the current model", "@model <name>"),
                          prefix, self.change_model)
        registry.register(CommandSpec("@read", CommandArity.FILE_QUERY,
                                      "Use file as context and answer the query", "@read <file>: <query>"),
                          prefix, self.read)
        registry.register(CommandSpec("@understand", CommandArity.FILE,
                                      "Get detailed code understanding with context", "@understand <file>"),
                          prefix, self.understand)
        registry.register(CommandSpec("@analyze", CommandArity.FILE, "Analyze code in a file", "@analyze <file>"),
                          prefix, self.analyze)
        registry.register(CommandSpec("@search", CommandArity.QUERY, "Search code in workspace", "@search <query>"),
                          prefix, self.search)
        registry.register(CommandSpec("@edit", CommandArity.FILE_LINE_CONTENT, "Edit a file",
                                      "@edit <file> <line> <content>"),
                          prefix, self.edit)
        registry.register(CommandSpec("@explain", CommandArity.FILE, "Explain code in a file", "@explain <file>"),
                          prefix, self.explain)
        registry.register(CommandSpec("@refactor", CommandArity.FILE, "Suggest refactoring", "@refactor <file>"),
                          prefix, self.refactor)
        registry.register(CommandSpec("@deps", CommandArity.FILE, "Analyze dependencies", "@deps <file>"),
                          prefix, self.dependencies)
        registry.register(CommandSpec("@outline", CommandArity.FILE,
                                      "Summarize a file locally without asking the model", "@outline <file>"),
                          prefix, self.outline)
        return registry

    def handle_command(self, session: SessionContext, command: str) -> str:
        session.add_turn(USER, command)

        try:
            if command.strip() == SIGIL:
                return reports.format_suggestions(self.registry.specs())

            parsed = parse_command(command)
            entry, arguments = self.registry.resolve(parsed)
            logger.debug("Running %s", entry.spec.sigil)
            return entry.handler(session, arguments)
        except UnknownCommandError as e:
            return f"Unknown command: {e.token}\nType @help to see available commands"
        except FormatError as e:
            return str(e)
        except Exception as e:
            logger.exception("Error handling command %r", command)
            return f"Error executing command: {e}"

    def _isolated_chat(self, session: SessionContext, prompt: str) -> str:
        return self.inference_client.chat(session.model, [{"role": USER, "content": prompt}])

    @staticmethod
    def _require_file(arguments: CommandArguments, usage: str) -> str:
        if not arguments.argument:
            raise FormatError(f"Error: Missing file path. Use {usage}")
        return arguments.argument

    def help(self, session: SessionContext, arguments: CommandArguments) -> str:
        return reports.format_help(self.registry.specs())

    def list_models(self, session: SessionContext, arguments: CommandArguments) -> str:
        return reports.format_models(self.inference_client.list_models())

    def clear(self, session: SessionContext, arguments: CommandArguments) -> str:
        session.clear_history()
        return "Chat history cleared"

    def info(self, session: SessionContext, arguments: CommandArguments) -> str:
        return f"Current model: {session.model}"

    def change_model(self, session: SessionContext, arguments: CommandArguments) -> str:
        # Model names carry tags after a colon (llama3:latest), so use the full remainder
        model_name = arguments.remainder
        models = self.inference_client.list_models()
        if any(model.name == model_name for model in models):
            session.set_model(model_name)
            session.clear_history()
            logger.info("Model changed to %s", model_name)
            return f"Model changed to: {model_name}"
        return f'Error: Model "{model_name}" not found'

    def workspace_query(self, session: SessionContext, arguments: CommandArguments) -> str:
        if not arguments.query:
            return "Please provide a query after @workspace:"
        if not self.workspace.is_open:
            return NO_WORKSPACE_MESSAGE

        tree = self.workspace.build_tree()
        prompt = f"Workspace Context:\n{tree}\n\nUser Query: {arguments.query}"
        return self._isolated_chat(session, prompt)

    def read(self, session: SessionContext, arguments: CommandArguments) -> str:
        path = self._require_file(arguments, "@read <file>: <query>")
        if not arguments.query:
            return "Please provide a query after the file path:"

        content = self.workspace.read_file(path)
        prompt = f"File Context ({path}):\n{content}\n\nUser Query: {arguments.query}"
        return self._isolated_chat(session, prompt)

    def understand(self, session: SessionContext, arguments: CommandArguments) -> str:
        path = self._require_file(arguments, "@understand <file>")
        content = self.workspace.read_file(path)
        return self._isolated_chat(session, UNDERSTAND_PROMPT.format(path=path, content=content))

    def analyze(self, session: SessionContext, arguments: CommandArguments) -> str:
        path = self._require_file(arguments, "@analyze <file>")
        content = self.workspace.read_file(path)
        report = self.inspector.inspect(content, self.config.duplicate_window_size)
        return reports.format_analysis(path, report, self.workspace.get_diagnostics(path))

    def search(self, session: SessionContext, arguments: CommandArguments) -> str:
        query = arguments.remainder
        if not query:
            raise FormatError("Error: Missing search query. Use @search <query>")
        if not self.workspace.is_open:
            raise NotFoundError(NO_WORKSPACE_MESSAGE)

        needle = query.lower()
        hits = []
        for path in self.workspace.list_files(self.config.exclude_globs):
            try:
                content = self.workspace.read_text_file(path)
            except NotFoundError as e:
                logger.warning("Skipping %s during search: %s", path, e)
                continue
            if content is None:
                logger.debug("Skipping binary file %s during search", path)
                continue
            for index, line in enumerate(content.split("\n"), start=1):
                if needle in line.lower():
                    hits.append((path, index, line.strip()))
        return reports.format_search_results(hits)

    def edit(self, session: SessionContext, arguments: CommandArguments) -> str:
        match = EDIT_PATTERN.match(arguments.raw)
        if not match:
            raise FormatError(EDIT_FORMAT_MESSAGE)

        path, line, content = match.group(1), int(match.group(2)), match.group(3)
        self.workspace.apply_line_edit(path, line, content)
        return f"✅ Successfully edited line {line} in {path}"

    def explain(self, session: SessionContext, arguments: CommandArguments) -> str:
        path = self._require_file(arguments, "@explain <file>")
        content = self.workspace.read_file(path)
        report = self.inspector.inspect(content, self.config.duplicate_window_size)
        return reports.format_explanation(
            path, report, self.workspace.get_diagnostics(path), self.config.file_complexity_threshold
        )

    def refactor(self, session: SessionContext, arguments: CommandArguments) -> str:
        path = self._require_file(arguments, "@refactor <file>")
        content = self.workspace.read_file(path)
        report = self.inspector.inspect(content, self.config.duplicate_window_size)

        long_functions = [
            (func.name, func.line_count)
            for func in report.functions
            if func.line_count > self.config.long_function_lines
        ]
        complex_functions = []
        for func in report.functions:
            score = self.inspector.complexity(func.body)
            if score > self.config.function_complexity_threshold:
                complex_functions.append((func.name, score))

        return reports.format_refactoring(path, long_functions, complex_functions, report)

    def dependencies(self, session: SessionContext, arguments: CommandArguments) -> str:
        path = self._require_file(arguments, "@deps <file>")
        content = self.workspace.read_file(path)
        imports = self.inspector.extract_imports(content)
        unused = self.inspector.find_unused_imports(content, imports)
        return reports.format_dependencies(path, imports, unused, self.workspace.get_package_dependencies())

    def outline(self, session: SessionContext, arguments: CommandArguments) -> str:
        path = self._require_file(arguments, "@outline <file>")
        content = self.workspace.read_file(path)
        return reports.format_outline(
            path,
            self.inspector.describe_purpose(content),
            self.inspector.key_components(content),
            self.inspector.code_flow(content),
            self.inspector.relationships(content),
            self.inspector.potential_issues(content),
        )
