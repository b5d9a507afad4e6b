"""Hook script runner for pre-/post-build checks.

Scripts are located by name, evaluated by the interpreter registered for
their extension, and must return None or true to pass.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

from hookscript.scripts.errors import (
    ScriptError,
    ScriptEvaluationError,
    ScriptReadError,
    ScriptReturnError,
)
from hookscript.scripts.interpreters import (
    DEFAULT_INTERPRETER,
    InterpreterRegistry,
    PythonScriptInterpreter,
    ScriptInterpreter,
    ShellScriptInterpreter,
)
from hookscript.scripts.locator import resolve_by_name, resolve_by_path, resolve_script
from hookscript.scripts.logger import ExecutionLogger, FileLogger
from hookscript.scripts.runner import (
    ScriptInvocation,
    ScriptRunner,
    check_result,
    is_passing_result,
)

__all__ = [
    "ScriptRunner",
    "ScriptInvocation",
    "check_result",
    "is_passing_result",
    "ScriptInterpreter",
    "PythonScriptInterpreter",
    "ShellScriptInterpreter",
    "InterpreterRegistry",
    "DEFAULT_INTERPRETER",
    "resolve_script",
    "resolve_by_name",
    "resolve_by_path",
    "ExecutionLogger",
    "FileLogger",
    "ScriptError",
    "ScriptReadError",
    "ScriptEvaluationError",
    "ScriptReturnError",
]
