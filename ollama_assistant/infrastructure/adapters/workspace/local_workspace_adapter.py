# infrastructure/adapters/workspace/local_workspace_adapter.py
import ast
import fnmatch
import json
import logging
import os
import re
import tomllib
from pathlib import Path
from typing import Dict, List, Optional

from werkzeug.security import safe_join

from ollama_assistant.core.domain.errors import LineRangeError, NotFoundError
from ollama_assistant.core.domain.models import Diagnostic, PackageDependency
from ollama_assistant.core.ports.workspace_port import WorkspacePort

logger = logging.getLogger(__name__)

NO_WORKSPACE_MESSAGE = "No workspace folder is open."

# Dependency caches and VCS metadata are never part of the project listing
ALWAYS_EXCLUDED_DIRS = {"node_modules", ".git", "__pycache__", ".venv", "venv", ".mypy_cache", ".pytest_cache"}

REQUIREMENT = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._\-]*(?:\[[^\]]*\])?)\s*(.*)$")


class LocalWorkspaceAdapter(WorkspacePort):
    def __init__(self, root: Optional[str] = None, exclude_globs: Optional[List[str]] = None):
        self.root = Path(root).resolve() if root else None
        self.exclude_globs = list(exclude_globs or [])

    @property
    def is_open(self) -> bool:
        return self.root is not None and self.root.is_dir()

    def _require_root(self) -> Path:
        if not self.is_open:
            raise NotFoundError(NO_WORKSPACE_MESSAGE)
        return self.root

    def _resolve(self, path: str) -> Path:
        root = self._require_root()
        joined = safe_join(str(root), path.strip().replace("\\", "/"))
        if joined is None:
            raise NotFoundError(f"File not found: {path}")
        return Path(joined)

    def list_files(self, exclude_globs: Optional[List[str]] = None) -> List[str]:
        root = self._require_root()
        patterns = self.exclude_globs + list(exclude_globs or [])
        files = []

        for current, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in ALWAYS_EXCLUDED_DIRS)
            for filename in filenames:
                relative = (Path(current) / filename).relative_to(root).as_posix()
                if any(fnmatch.fnmatch(relative, pattern) for pattern in patterns):
                    continue
                files.append(relative)

        return sorted(files)

    def read_text_file(self, path: str) -> Optional[str]:
        full_path = self._resolve(path)
        if not full_path.is_file():
            raise NotFoundError(f"File not found: {path}")
        try:
            with open(full_path, "r", encoding="utf-8") as file:
                return file.read()
        except UnicodeDecodeError:
            return None
        except OSError as e:
            raise NotFoundError(f"Error reading file {path}: {e}")

    def read_file(self, path: str) -> str:
        content = self.read_text_file(path)
        if content is None:
            return f"[Binary file content - {self._resolve(path).stat().st_size} bytes]"
        return content

    def get_diagnostics(self, path: str) -> List[Diagnostic]:
        try:
            content = self.read_file(path)
        except NotFoundError:
            return []

        suffix = Path(path).suffix.lower()
        if suffix == ".py":
            try:
                ast.parse(content, filename=path)
            except SyntaxError as e:
                return [Diagnostic(line=e.lineno or 1, message=e.msg, severity="error")]
        elif suffix == ".json":
            try:
                json.loads(content)
            except json.JSONDecodeError as e:
                return [Diagnostic(line=e.lineno, message=e.msg, severity="error")]
        return []

    def apply_line_edit(self, path: str, line_number: int, content: str) -> bool:
        full_path = self._resolve(path)
        if not full_path.is_file():
            raise NotFoundError(f"File not found: {path}")

        with open(full_path, "r", encoding="utf-8", newline="") as file:
            lines = file.read().split("\n")

        # Numbered like every line-based report; the piece after a final newline is not a line
        line_count = len(lines) - 1 if lines[-1] == "" else len(lines)
        if line_number < 1 or line_number > line_count:
            raise LineRangeError(f"Line {line_number} does not exist in {path} ({line_count} lines)")

        ending = "\r" if lines[line_number - 1].endswith("\r") else ""
        lines[line_number - 1] = content + ending

        with open(full_path, "w", encoding="utf-8", newline="") as file:
            file.write("\n".join(lines))

        logger.info("Edited line %d of %s", line_number, path)
        return True

    def get_package_dependencies(self) -> List[PackageDependency]:
        if not self.is_open:
            return []
        return self._package_json_dependencies() + self._pyproject_dependencies()

    def _package_json_dependencies(self) -> List[PackageDependency]:
        manifest = self.root / "package.json"
        if not manifest.is_file():
            return []
        try:
            data = json.loads(manifest.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Could not read %s: %s", manifest, e)
            return []

        dependencies = []
        for section in ("dependencies", "devDependencies"):
            for name, version in (data.get(section) or {}).items():
                dependencies.append(PackageDependency(name=name, version=str(version)))
        return dependencies

    def _pyproject_dependencies(self) -> List[PackageDependency]:
        manifest = self.root / "pyproject.toml"
        if not manifest.is_file():
            return []
        try:
            with open(manifest, "rb") as file:
                data = tomllib.load(file)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning("Could not read %s: %s", manifest, e)
            return []

        project = data.get("project") or {}
        requirements = list(project.get("dependencies") or [])
        for extra in (project.get("optional-dependencies") or {}).values():
            requirements.extend(extra)

        dependencies = []
        for requirement in requirements:
            match = REQUIREMENT.match(requirement)
            if match:
                dependencies.append(PackageDependency(name=match.group(1), version=match.group(2).strip() or "*"))
        return dependencies

    def build_tree(self) -> str:
        if not self.is_open:
            return NO_WORKSPACE_MESSAGE

        tree: Dict[str, Optional[dict]] = {}
        for relative in self.list_files():
            parts = relative.split("/")
            current = tree
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = None

        return "Workspace Structure:\n\n" + self._format_tree(tree)

    def _format_tree(self, tree: Dict[str, Optional[dict]], level: int = 0) -> str:
        output = ""
        indent = "  " * level
        for name, children in tree.items():
            if children is None:
                output += f"{indent}📄 {name}\n"
            else:
                output += f"{indent}📁 {name}/\n"
                output += self._format_tree(children, level + 1)
        return output
