# infrastructure/adapters/inspectors/heuristic_inspector.py
"""
Line-scan heuristics over source text.

Nothing here parses code. Functions and classes are found by matching the
start of a line, and a body simply runs until the next start line, so nested
definitions and trailing top-level statements end up in the wrong place.
Reports built on top of this module depend on those boundaries.
"""
import re
from typing import List

from ollama_assistant.core.domain.models import (
    ClassInfo,
    Component,
    DuplicateWindow,
    FileStatistics,
    FunctionInfo,
)
from ollama_assistant.core.ports.code_inspector_port import CodeInspectorPort

BRANCH_TOKENS = ("if", "else", "for", "while", "switch", "catch", "&&", "||")
FLOW_PREFIXES = ("if", "for", "while", "switch")

FUNCTION_START = re.compile(r"^(?:async\s+)?function\s+(\w+)")
ASSIGNED_FUNCTION_START = re.compile(r"^(?:async\s+)?(\w+)\s*=\s*function")
CLASS_START = re.compile(r"^class\s+(\w+)")

VARIABLE_DECLARATION = re.compile(r"^(const|let|var)\s+(\w+)")
FUNCTION_DECLARATION = re.compile(r"^(async\s+)?function\s+(\w+)")
CAMEL_CASE = re.compile(r"^[a-z][a-zA-Z0-9]*$")
PASCAL_CASE = re.compile(r"^[A-Z][a-zA-Z0-9]*$")

NAMED_BINDINGS = re.compile(r"\{([^}]*)\}")
NAMESPACE_BINDING = re.compile(r"import\s+\*\s+as\s+(\w+)")
ALIASED_BINDING = re.compile(r"import\s+[\w.]+\s+as\s+(\w+)")
PLAIN_BINDINGS = re.compile(r"import\s+([\w.]+(?:\s*,\s*[\w.]+)*)")
EXTENDS = re.compile(r"extends\s+(\w+)")


def _split_lines(text: str) -> List[str]:
    return text.split("\n")


def _bound_names(statement: str) -> List[str]:
    """Names an import statement introduces; empty for side-effect imports."""
    names = []
    named = NAMED_BINDINGS.search(statement)
    if named:
        for part in named.group(1).split(","):
            part = part.strip()
            if part:
                names.append(part.split(" as ")[-1].strip())

    namespace = NAMESPACE_BINDING.search(statement)
    if namespace:
        names.append(namespace.group(1))
        return names

    aliased = ALIASED_BINDING.search(statement)
    if aliased:
        names.append(aliased.group(1))
        return names

    plain = PLAIN_BINDINGS.match(statement)
    if plain:
        for part in plain.group(1).split(","):
            name = part.strip().split(".")[0]
            if name:
                names.append(name)
    return names


class HeuristicCodeInspector(CodeInspectorPort):
    def __init__(self, long_function_lines: int = 20, function_complexity_threshold: int = 5,
                 window_size: int = 5):
        self.long_function_lines = long_function_lines
        self.function_complexity_threshold = function_complexity_threshold
        self.window_size = window_size

    def statistics(self, text: str) -> FileStatistics:
        lines = _split_lines(text)
        return FileStatistics(
            total_lines=len(lines),
            non_empty_lines=sum(1 for line in lines if line.strip()),
        )

    def complexity(self, text: str) -> int:
        """Start at 1 and add one for every line holding any branching token."""
        complexity = 1
        for line in _split_lines(text):
            trimmed = line.strip()
            if any(token in trimmed for token in BRANCH_TOKENS):
                complexity += 1
        return complexity

    def extract_functions(self, text: str) -> List[FunctionInfo]:
        functions = []
        name = None
        body: List[str] = []

        for line in _split_lines(text):
            trimmed = line.strip()
            match = FUNCTION_START.match(trimmed) or ASSIGNED_FUNCTION_START.match(trimmed)
            if match:
                if name is not None:
                    functions.append(FunctionInfo(name=name, body="\n".join(body), line_count=len(body)))
                name = match.group(1) or "anonymous"
                body = [line]
            elif name is not None:
                body.append(line)

        if name is not None:
            functions.append(FunctionInfo(name=name, body="\n".join(body), line_count=len(body)))
        return functions

    def extract_classes(self, text: str) -> List[ClassInfo]:
        classes = []
        name = None
        body: List[str] = []

        for line in _split_lines(text):
            match = CLASS_START.match(line.strip())
            if match:
                if name is not None:
                    classes.append(ClassInfo(name=name, body="\n".join(body)))
                name = match.group(1) or "anonymous"
                body = [line]
            elif name is not None:
                body.append(line)

        if name is not None:
            classes.append(ClassInfo(name=name, body="\n".join(body)))
        return classes

    def find_duplicate_windows(self, text: str, window_size: int = 5) -> List[DuplicateWindow]:
        """
        Compare every pair of non-overlapping windows of `window_size` lines.

        Quadratic in the number of lines. Each matching pair reports the
        earlier window, so a block repeated three times shows up more than once.
        """
        lines = _split_lines(text)
        last_start = len(lines) - window_size
        duplicates = []

        for i in range(last_start + 1):
            window = "\n".join(lines[i:i + window_size])
            for j in range(i + window_size, last_start + 1):
                if window == "\n".join(lines[j:j + window_size]):
                    duplicates.append(DuplicateWindow(start_line=i + 1, end_line=i + window_size))
        return duplicates

    def check_naming(self, text: str) -> List[str]:
        issues = []
        for index, line in enumerate(_split_lines(text), start=1):
            variable = VARIABLE_DECLARATION.match(line)
            if variable and not CAMEL_CASE.match(variable.group(2)):
                issues.append(f"Line {index}: Variable '{variable.group(2)}' should use camelCase")

            function = FUNCTION_DECLARATION.match(line)
            if function and not CAMEL_CASE.match(function.group(2)):
                issues.append(f"Line {index}: Function '{function.group(2)}' should use camelCase")

            klass = CLASS_START.match(line)
            if klass and not PASCAL_CASE.match(klass.group(1)):
                issues.append(f"Line {index}: Class '{klass.group(1)}' should use PascalCase")
        return issues

    def extract_imports(self, text: str) -> List[str]:
        return [line.strip() for line in _split_lines(text) if line.strip().startswith("import")]

    def find_unused_imports(self, text: str, imports: List[str]) -> List[str]:
        statements = set(imports)
        rest = "\n".join(line for line in _split_lines(text) if line.strip() not in statements)

        unused = []
        for statement in imports:
            names = _bound_names(statement)
            if names and not any(name in rest for name in names):
                unused.append(statement)
        return unused

    def describe_purpose(self, text: str) -> str:
        first_line = _split_lines(text)[0].strip()

        if first_line.startswith("//"):
            return first_line[2:].strip()
        if first_line.startswith("/*"):
            return first_line[2:].rstrip("/").rstrip("*").strip()
        if first_line.startswith("#") and not first_line.startswith("#!"):
            return first_line[1:].strip()
        if first_line.startswith(('"""', "'''")):
            return first_line.strip("\"'").strip()

        return "This file appears to be a source code file. Purpose could not be determined from comments."

    def key_components(self, text: str) -> List[Component]:
        components = [
            Component(name=cls.name, kind="Class", description=f"A class with {cls.line_count} lines of code")
            for cls in self.extract_classes(text)
        ]
        components.extend(
            Component(name=func.name, kind="Function", description=f"A function with {func.line_count} lines of code")
            for func in self.extract_functions(text)
        )
        return components

    def code_flow(self, text: str) -> str:
        branches = [line.strip() for line in _split_lines(text) if line.strip().startswith(FLOW_PREFIXES)]
        if not branches:
            return "Linear execution flow with no conditional branches\n"

        flow = "Main execution flow includes:\n"
        for line in branches:
            flow += f"- {line}\n"
        return flow

    def relationships(self, text: str) -> str:
        parts = []
        imports = self.extract_imports(text)
        if imports:
            parts.append("Imports:")
            parts.extend(f"- {imp}" for imp in imports)

        class_lines = [line for line in _split_lines(text) if line.strip().startswith("class")]
        if class_lines:
            parts.append("\nClass Relationships:")
            for line in class_lines:
                parent = EXTENDS.search(line)
                if parent:
                    parts.append(f"- Extends {parent.group(1)}")
        return "\n".join(parts)

    def potential_issues(self, text: str) -> List[str]:
        functions = self.extract_functions(text)
        issues = [
            f"Long function '{func.name}' ({func.line_count} lines)"
            for func in functions
            if func.line_count > self.long_function_lines
        ]

        for func in functions:
            score = self.complexity(func.body)
            if score > self.function_complexity_threshold:
                issues.append(f"Complex function '{func.name}' (complexity: {score})")

        duplicates = self.find_duplicate_windows(text, self.window_size)
        if duplicates:
            issues.append(f"{len(duplicates)} potential code duplications found")
        return issues
