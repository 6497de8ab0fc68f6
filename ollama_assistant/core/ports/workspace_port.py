# core/ports/workspace_port.py
from abc import ABC, abstractmethod
from typing import List, Optional

from ollama_assistant.core.domain.models import Diagnostic, PackageDependency


class WorkspacePort(ABC):
    @property
    @abstractmethod
    def is_open(self) -> bool:
        pass

    @abstractmethod
    def list_files(self, exclude_globs: Optional[List[str]] = None) -> List[str]:
        pass

    @abstractmethod
    def read_text_file(self, path: str) -> Optional[str]:
        """File text, or None when the file does not decode as text."""
        pass

    @abstractmethod
    def read_file(self, path: str) -> str:
        pass

    @abstractmethod
    def get_diagnostics(self, path: str) -> List[Diagnostic]:
        """Best-effort; an empty list when no diagnostic source is available."""
        pass

    @abstractmethod
    def apply_line_edit(self, path: str, line_number: int, content: str) -> bool:
        pass

    @abstractmethod
    def get_package_dependencies(self) -> List[PackageDependency]:
        pass

    @abstractmethod
    def build_tree(self) -> str:
        pass
