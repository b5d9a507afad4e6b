"""Hook script failure taxonomy.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

from typing import Any, Optional


class ScriptError(Exception):
    """Base class for hook script failures."""

    pass


class ScriptReadError(ScriptError, OSError):
    """Raised when the script file cannot be read or decoded."""

    pass


class ScriptEvaluationError(ScriptError):
    """Raised when an interpreter fails while running a script.

    The original exception is kept in ``cause`` and is also chained as
    ``__cause__``.
    """

    def __init__(self, cause: Optional[BaseException] = None, message: Optional[str] = None):
        if message is None:
            message = str(cause) if cause is not None else "script evaluation failed"
        super().__init__(message)
        self.cause = cause


class ScriptReturnError(ScriptError):
    """Raised when a script returns a value that is neither None nor true."""

    def __init__(self, message: str, result: Any):
        super().__init__(message)
        self.result = result
