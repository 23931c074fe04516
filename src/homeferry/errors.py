from enum import Enum


class ErrorKind(Enum):
    """How a failed operation affects the surrounding run."""
    FATAL = "fatal"
    RECOVERABLE = "recoverable"
    DECLINED = "declined"


class HomeferryError(Exception):
    kind = ErrorKind.RECOVERABLE

    def __init__(self, message, hint=None):
        super().__init__(message)
        self.hint = hint


class FatalError(HomeferryError):
    """A precondition failed; the run must stop with a non-zero exit code."""
    kind = ErrorKind.FATAL


class DeclinedError(HomeferryError):
    """The operator answered no. Neither a success nor a failure."""
    kind = ErrorKind.DECLINED


class ToolUnavailableError(HomeferryError):
    """The compression backend is missing from this interpreter."""


class PermissionDeniedError(HomeferryError):
    pass


class OperationFailedError(HomeferryError):
    pass
