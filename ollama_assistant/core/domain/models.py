# core/domain/models.py
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from ollama_assistant.core.domain.errors import FormatError

USER = "user"
ASSISTANT = "assistant"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Turn:
    role: str
    content: str
    timestamp: datetime = field(default_factory=_utc_now)

    def to_message(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}

    def to_dict(self) -> Dict[str, str]:
        return {
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Turn":
        timestamp = data.get("timestamp")
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
        elif timestamp is not None and not isinstance(timestamp, datetime):
            raise TypeError(f"timestamp must be an ISO-8601 string, got {type(timestamp).__name__}")
        return cls(
            role=data["role"],
            content=data["content"],
            timestamp=timestamp or _utc_now(),
        )


@dataclass
class ModelDescriptor:
    name: str
    size: Any = None
    modified_at: Optional[str] = None


class CommandArity(Enum):
    NONE = "none"
    QUERY = "query"
    FILE = "file"
    FILE_QUERY = "file+query"
    FILE_LINE_CONTENT = "file+line+content"


@dataclass(frozen=True)
class CommandSpec:
    sigil: str
    arity: CommandArity
    description: str
    usage: str = ""


@dataclass
class FileStatistics:
    total_lines: int
    non_empty_lines: int


@dataclass
class FunctionInfo:
    name: str
    body: str
    line_count: int


@dataclass
class ClassInfo:
    name: str
    body: str

    @property
    def line_count(self) -> int:
        return len(self.body.split("\n"))


@dataclass(frozen=True)
class DuplicateWindow:
    start_line: int
    end_line: int


@dataclass
class Diagnostic:
    line: int
    message: str
    severity: str = "error"


@dataclass
class PackageDependency:
    name: str
    version: str


@dataclass
class Component:
    name: str
    kind: str
    description: str


@dataclass
class InspectionReport:
    """Everything the heuristic inspector can say about one file.

    Built on demand for a single command and thrown away afterwards.
    """
    statistics: FileStatistics
    complexity: int
    duplicates: List[DuplicateWindow] = field(default_factory=list)
    naming_issues: List[str] = field(default_factory=list)
    functions: List[FunctionInfo] = field(default_factory=list)
    classes: List[ClassInfo] = field(default_factory=list)
    imports: List[str] = field(default_factory=list)


@dataclass
class FileContext:
    path: str
    content: str


@dataclass
class SessionContext:
    """State owned by one chat session: current model, transcript and ambient context."""
    model: str
    history: List[Turn] = field(default_factory=list)
    workspace_context: str = ""
    file_context: Optional[FileContext] = None

    def add_turn(self, role: str, content: str) -> Turn:
        turn = Turn(role=role, content=content)
        self.history.append(turn)
        return turn

    def clear_history(self):
        self.history = []

    def set_model(self, model: str):
        self.model = model

    def messages(self) -> List[Dict[str, str]]:
        return [turn.to_message() for turn in self.history]

    def to_state(self) -> Dict[str, Any]:
        return {
            "history": [turn.to_dict() for turn in self.history],
            "model": self.model,
        }

    def load_state(self, state: Dict[str, Any]):
        """Replace model and transcript from a persisted {history, model} object; nothing changes on FormatError"""
        if not isinstance(state, dict):
            raise FormatError("Invalid session state: expected an object with history and model")

        model = state.get("model")
        if model is not None and not isinstance(model, str):
            raise FormatError("Invalid session state: model must be a string")

        items = state.get("history") or []
        if not isinstance(items, list):
            raise FormatError("Invalid session state: history must be a list")

        history = []
        for item in items:
            if not (isinstance(item, dict) and isinstance(item.get("role"), str)
                    and isinstance(item.get("content"), str)):
                raise FormatError("Invalid session state: every history item needs a role and content")
            try:
                history.append(Turn.from_dict(item))
            except (TypeError, ValueError) as e:
                raise FormatError(f"Invalid session state: {e}")

        if model:
            self.model = model
        self.history = history


@dataclass
class AssistantConfig:
    endpoint: str = "http://localhost:11434"
    default_model: str = "llama2-uncensored"
    request_timeout: float = 120.0
    exclude_globs: List[str] = field(default_factory=list)
    long_function_lines: int = 20
    function_complexity_threshold: int = 5
    file_complexity_threshold: int = 10
    duplicate_window_size: int = 5
