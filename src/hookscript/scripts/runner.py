"""Hook script runner.

Resolves a hook script, picks the interpreter for its extension, runs it
with the runner's variables and checks the returned value.

A script passes when it returns None or a value whose text form is
"true" (any case). Anything else fails with ScriptReturnError.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

import logging
import traceback
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from hookscript.scripts.errors import (
    ScriptEvaluationError,
    ScriptReadError,
    ScriptReturnError,
)
from hookscript.scripts.interpreters import (
    InterpreterRegistry,
    ScriptInterpreter,
    ShellScriptInterpreter,
)
from hookscript.scripts.locator import resolve_by_name, resolve_by_path
from hookscript.scripts.logger import ExecutionLogger


@dataclass(frozen=True)
class ScriptInvocation:
    """A single hook script run, as handed to the interpreter."""

    description: str
    script_path: Path
    variables: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    class_path: Tuple[str, ...] = ()


def is_passing_result(result: Any) -> bool:
    """Apply the pass/fail rule to a script's return value.

    None passes. Otherwise the value's text form must read "true",
    compared case-insensitively.

    Example:
        >>> is_passing_result(None), is_passing_result(True), is_passing_result("no")
        (True, True, False)
    """
    if result is None:
        return True
    return str(result).lower() == "true"


def check_result(description: str, result: Any) -> None:
    """Raise ScriptReturnError unless the result passes."""
    if not is_passing_result(result):
        raise ScriptReturnError(f"The {description} returned {result}.", result)


class ScriptRunner:
    """Runs pre-/post-build hook scripts.

    Python (``.py``) and bash (``.sh``) interpreters are registered by
    default; Python is also used for unrecognized extensions.

    Not safe for concurrent use; keep one runner per thread.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._registry = InterpreterRegistry()
        self._registry.register("sh", ShellScriptInterpreter())
        self._global_variables: Dict[str, Any] = {}
        self._class_path: List[str] = []
        self._encoding: Optional[str] = None

    @classmethod
    def from_config(cls, config: Optional[Mapping[str, Any]]) -> "ScriptRunner":
        """Build a runner from a configuration mapping.

        Recognized keys: encoding, class_path, globals.
        """
        config = config or {}
        runner = cls()
        runner.set_script_encoding(config.get("encoding"))
        runner.set_class_path(config.get("class_path"))
        for name, value in (config.get("globals") or {}).items():
            runner.set_global_variable(name, value)
        return runner

    @property
    def registry(self) -> InterpreterRegistry:
        return self._registry

    @property
    def class_path(self) -> List[str]:
        return list(self._class_path)

    @property
    def script_encoding(self) -> Optional[str]:
        return self._encoding

    @property
    def global_variables(self) -> Dict[str, Any]:
        return dict(self._global_variables)

    def add_script_interpreter(self, extension: str, interpreter: ScriptInterpreter) -> None:
        """Register an interpreter for a file extension (e.g. "rb")."""
        self._registry.register(extension, interpreter)

    def set_global_variable(self, name: str, value: Any) -> None:
        """Set a variable passed to every script. ``basedir`` and ``context`` are reserved."""
        self._global_variables[name] = value

    def set_class_path(self, class_path: Optional[List[Union[str, Path]]]) -> None:
        """Set additional import/lookup paths for scripts. The list is copied."""
        self._class_path = [str(p) for p in class_path] if class_path else []

    def set_script_encoding(self, encoding: Optional[str]) -> None:
        """Set the hook scripts' file encoding; None or empty means platform default."""
        self._encoding = encoding if encoding else None

    def run(
        self,
        description: str,
        basedir: Union[str, Path],
        relative_script_path: Optional[str],
        context: Optional[Dict[str, Any]] = None,
        logger: Optional[ExecutionLogger] = None,
    ) -> None:
        """Run a hook script found by name in a base directory.

        The name may omit the extension; each registered extension is tried
        in registration order. A None name or a script that cannot be found
        is skipped silently.

        Args:
            description: Description used in log lines and error messages.
            basedir: Directory the script name is relative to.
            relative_script_path: Script name or relative path, may be None.
            context: Shared key-value storage passed to the script as
                ``context``, may be None.
            logger: Execution logger receiving the transcript, may be None.

        Raises:
            ScriptReadError: If the script file cannot be read.
            ScriptEvaluationError: If the script raised an error.
            ScriptReturnError: If the script returned a failing value.
        """
        if relative_script_path is None:
            self.logger.debug(f"{description}: relative_script_path is None, not executing script")
            return

        script_file = resolve_by_name(basedir, relative_script_path, self._registry.extensions())

        if not script_file.exists():
            self.logger.debug(
                f"{description} : no script '{relative_script_path}' found in directory "
                f"{Path(basedir).absolute()}"
            )
            return

        self.logger.info(f"run {description} {script_file}")

        self._execute_run(description, script_file, context, logger)

    def run_file(
        self,
        description: str,
        script_file: Union[str, Path],
        context: Optional[Dict[str, Any]] = None,
        logger: Optional[ExecutionLogger] = None,
    ) -> None:
        """Run a hook script given by its exact path.

        A missing file is skipped silently. Raises the same errors as run().
        """
        script_file = resolve_by_path(script_file)

        if not script_file.exists():
            self.logger.debug(f"{description} : script file not found {script_file.absolute()}")
            return

        self.logger.info(f"run {description} {script_file.absolute()}")

        self._execute_run(description, script_file, context, logger)

    def _read_script(self, description: str, script_file: Path) -> str:
        try:
            return script_file.read_text(encoding=self._encoding)
        except (OSError, UnicodeError, LookupError) as e:
            raise ScriptReadError(f"error reading {description} {script_file}, {e}") from e

    def _build_invocation(
        self, description: str, script_file: Path, context: Optional[Dict[str, Any]]
    ) -> ScriptInvocation:
        variables = dict(self._global_variables)
        variables["basedir"] = script_file.parent
        variables["context"] = context
        return ScriptInvocation(
            description=description,
            script_path=script_file,
            variables=MappingProxyType(variables),
            class_path=tuple(self._class_path),
        )

    def _execute_run(
        self,
        description: str,
        script_file: Path,
        context: Optional[Dict[str, Any]],
        logger: Optional[ExecutionLogger],
    ) -> None:
        interpreter = self._registry.resolve(script_file)
        self.logger.debug(f"Running script with {type(interpreter).__name__} :{script_file}")

        script = self._read_script(description, script_file)
        invocation = self._build_invocation(description, script_file, context)

        out = logger.stream if logger is not None else None
        try:
            if logger is not None:
                logger.consume_line(f"Running {description}: {script_file}")

            result = interpreter.evaluate(
                script,
                list(invocation.class_path),
                dict(invocation.variables),
                out,
            )

            if logger is not None:
                logger.consume_line(f"Finished {description}: {script_file}")
        except Exception as e:
            error = e if isinstance(e, ScriptEvaluationError) else ScriptEvaluationError(e)
            cause = error.cause if error.cause is not None else error
            if out is not None:
                traceback.print_exception(type(cause), cause, cause.__traceback__, file=out)
                out.flush()
            if error is e:
                raise
            raise error from e

        check_result(description, result)

    def close(self) -> None:
        """Release interpreter resources."""
        self._registry.close()

    def __enter__(self) -> "ScriptRunner":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
