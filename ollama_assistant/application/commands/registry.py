# application/commands/registry.py
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from ollama_assistant.core.domain.errors import UnknownCommandError
from ollama_assistant.core.domain.models import CommandSpec, SessionContext

SIGIL = "@"


class MatchKind(Enum):
    EXACT = "exact"
    PREFIX = "prefix"


@dataclass(frozen=True)
class ParsedCommand:
    """A command line split on its first colon; case is preserved."""
    raw: str
    command_part: str
    query: str

    @property
    def keyword(self) -> str:
        return self.command_part.lower()


@dataclass(frozen=True)
class CommandArguments:
    raw: str
    argument: str
    query: str
    remainder: str


Handler = Callable[[SessionContext, CommandArguments], str]


@dataclass(frozen=True)
class CommandEntry:
    spec: CommandSpec
    match: MatchKind
    handler: Handler
    prefix: str

    def matches(self, keyword: str) -> bool:
        if self.match is MatchKind.EXACT:
            return keyword == self.prefix
        # A bare "@read" still reaches its handler, which reports the missing argument
        return keyword.startswith(self.prefix) or keyword == self.prefix.rstrip()

    def arguments(self, parsed: ParsedCommand) -> CommandArguments:
        size = len(self.prefix)
        return CommandArguments(
            raw=parsed.raw,
            argument=parsed.command_part[size:].strip(),
            query=parsed.query,
            remainder=parsed.raw[size:].strip(),
        )


def parse_command(text: str) -> ParsedCommand:
    raw = text.strip()
    command_part, _, query = raw.partition(":")
    return ParsedCommand(raw=raw, command_part=command_part.strip(), query=query.strip())


class CommandRegistry:
    """Ordered command table: exact entries are tried before prefix entries."""

    def __init__(self):
        self._entries: List[CommandEntry] = []

    def register(self, spec: CommandSpec, match: MatchKind, handler: Handler, prefix: Optional[str] = None):
        if prefix is None:
            prefix = spec.sigil if match is MatchKind.EXACT else f"{spec.sigil} "
        self._entries.append(CommandEntry(spec=spec, match=match, handler=handler, prefix=prefix))

    def resolve(self, parsed: ParsedCommand) -> Tuple[CommandEntry, CommandArguments]:
        keyword = parsed.keyword
        for kind in (MatchKind.EXACT, MatchKind.PREFIX):
            for entry in self._entries:
                if entry.match is kind and entry.matches(keyword):
                    return entry, entry.arguments(parsed)
        raise UnknownCommandError(parsed.command_part)

    def specs(self) -> List[CommandSpec]:
        return [entry.spec for entry in self._entries]

    def sigils(self) -> List[str]:
        return [entry.spec.sigil for entry in self._entries]
