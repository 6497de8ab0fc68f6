# core/domain/errors.py
from typing import Optional


class AssistantError(Exception):
    """Base class for every failure raised by the assistant"""


class InferenceError(AssistantError):
    """The inference server answered with something we cannot use"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class TransportError(InferenceError):
    """Non-2xx status or network failure while talking to the inference server"""


class NotFoundError(AssistantError):
    """Missing workspace, file or line"""


class LineRangeError(NotFoundError):
    pass


class FormatError(AssistantError):
    """Malformed command arguments"""


class UnknownCommandError(AssistantError):
    def __init__(self, token: str):
        super().__init__(f"Unknown command: {token}")
        self.token = token
