# core/ports/code_inspector_port.py
from abc import ABC, abstractmethod
from typing import List

from ollama_assistant.core.domain.models import (
    ClassInfo,
    Component,
    DuplicateWindow,
    FileStatistics,
    FunctionInfo,
    InspectionReport,
)


class CodeInspectorPort(ABC):
    """Pure text analysis. Implementations must not touch the file system."""

    @abstractmethod
    def statistics(self, text: str) -> FileStatistics:
        pass

    @abstractmethod
    def complexity(self, text: str) -> int:
        pass

    @abstractmethod
    def extract_functions(self, text: str) -> List[FunctionInfo]:
        pass

    @abstractmethod
    def extract_classes(self, text: str) -> List[ClassInfo]:
        pass

    @abstractmethod
    def find_duplicate_windows(self, text: str, window_size: int = 5) -> List[DuplicateWindow]:
        pass

    @abstractmethod
    def check_naming(self, text: str) -> List[str]:
        pass

    @abstractmethod
    def extract_imports(self, text: str) -> List[str]:
        pass

    @abstractmethod
    def find_unused_imports(self, text: str, imports: List[str]) -> List[str]:
        pass

    @abstractmethod
    def describe_purpose(self, text: str) -> str:
        pass

    @abstractmethod
    def key_components(self, text: str) -> List[Component]:
        pass

    @abstractmethod
    def code_flow(self, text: str) -> str:
        pass

    @abstractmethod
    def relationships(self, text: str) -> str:
        pass

    @abstractmethod
    def potential_issues(self, text: str) -> List[str]:
        pass

    def inspect(self, text: str, window_size: int = 5) -> InspectionReport:
        return InspectionReport(
            statistics=self.statistics(text),
            complexity=self.complexity(text),
            duplicates=self.find_duplicate_windows(text, window_size),
            naming_issues=self.check_naming(text),
            functions=self.extract_functions(text),
            classes=self.extract_classes(text),
            imports=self.extract_imports(text),
        )
