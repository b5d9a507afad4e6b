"""Script interpreters and the extension-keyed interpreter registry.

Two engines are built in:
- py: Python source, evaluated in-process (the fallback)
- sh: bash scripts, run in a subprocess

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

import ast
import functools
import importlib
import json
import logging
import os
import re
import subprocess
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, TextIO, Tuple

from hookscript.scripts.errors import ScriptEvaluationError

logger = logging.getLogger(__name__)

# Used for any script whose extension is not registered
DEFAULT_INTERPRETER = "py"

# Name bound to the value of a trailing expression statement
_TRAILING_VALUE = "__hookscript_value__"

_UNSET = object()

_ENV_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class ScriptInterpreter(ABC):
    """Evaluates hook script source text."""

    def set_class_path(self, class_path: Sequence[str]) -> None:
        """Make additional locations available to scripts.

        Args:
            class_path: Paths to add, may be empty.
        """

    @abstractmethod
    def evaluate_script(
        self,
        script: str,
        variables: Optional[Mapping[str, Any]],
        script_output: Optional[TextIO],
    ) -> Any:
        """Run the script and return its result.

        Args:
            script: Script source text.
            variables: Global variables visible to the script, may be None.
            script_output: Stream receiving the script's output, or None to
                leave output on the process streams.

        Returns:
            Whatever the script produced as its result (may be None).

        Raises:
            ScriptEvaluationError: If the script could not be run or failed.
        """

    def evaluate(
        self,
        script: str,
        class_path: Sequence[str],
        variables: Optional[Mapping[str, Any]],
        script_output: Optional[TextIO],
    ) -> Any:
        """Apply the class path, then evaluate the script."""
        self.set_class_path(class_path)
        return self.evaluate_script(script, variables, script_output)

    def close(self) -> None:
        """Release any resources held by the interpreter."""


class PythonScriptInterpreter(ScriptInterpreter):
    """Evaluates Python hook scripts in-process.

    Variables become module globals of the script. The result is the value
    of a top-level ``result`` name if the script assigns one, otherwise the
    value of the last statement when that statement is an expression.
    ``print`` inside the script writes to the script output stream, which is
    also bound to ``out`` for direct writes. ``sys.stdout`` is left alone.
    """

    def __init__(self):
        self._class_path: List[str] = []

    def set_class_path(self, class_path: Sequence[str]) -> None:
        added = False
        for entry in class_path or []:
            entry = str(entry)
            if entry not in self._class_path:
                self._class_path.append(entry)
                added = True
        if added:
            importlib.invalidate_caches()

    @property
    def class_path(self) -> List[str]:
        return list(self._class_path)

    def _compile(self, script: str):
        tree = ast.parse(script, filename="<hook script>", mode="exec")
        if tree.body and isinstance(tree.body[-1], ast.Expr):
            last = tree.body[-1]
            assign = ast.Assign(
                targets=[ast.Name(id=_TRAILING_VALUE, ctx=ast.Store())],
                value=last.value,
            )
            tree.body[-1] = ast.copy_location(assign, last)
            ast.fix_missing_locations(tree)
        return compile(tree, "<hook script>", "exec")

    def evaluate_script(
        self,
        script: str,
        variables: Optional[Mapping[str, Any]],
        script_output: Optional[TextIO],
    ) -> Any:
        namespace: Dict[str, Any] = {"__name__": "__hookscript__"}
        namespace.update(variables or {})
        if script_output is not None:
            namespace["out"] = script_output
            namespace["print"] = functools.partial(print, file=script_output)
        initial_result = namespace.get("result", _UNSET)

        added = [p for p in self._class_path if p not in sys.path]
        sys.path[:0] = added
        try:
            code = self._compile(script)
            exec(code, namespace)
        except (Exception, SystemExit) as e:
            raise ScriptEvaluationError(e) from e
        finally:
            for entry in added:
                if entry in sys.path:
                    sys.path.remove(entry)

        # A "result" passed in as a variable only counts once the script rebinds it
        if namespace.get("result", _UNSET) is not initial_result:
            return namespace["result"]
        return namespace.get(_TRAILING_VALUE)

    def close(self) -> None:
        self._class_path = []


def _to_environment(variables: Mapping[str, Any]) -> Dict[str, str]:
    """Render script variables as environment variables.

    Mappings and sequences are passed as JSON, booleans as true/false.
    None becomes an empty string. Names that are not valid shell
    identifiers are skipped.
    """
    env = {}
    for name, value in variables.items():
        if not _ENV_NAME_PATTERN.match(name):
            logger.debug(f"Skipping variable not usable in the environment: {name}")
            continue
        if value is None:
            env[name] = ""
        elif isinstance(value, bool):
            env[name] = "true" if value else "false"
        elif isinstance(value, (str, int, float, Path)):
            env[name] = str(value)
        else:
            env[name] = json.dumps(value, default=str)
    return env


class ShellScriptInterpreter(ScriptInterpreter):
    """Runs hook scripts with bash.

    The script runs in strict mode (``set -euo pipefail``) from the
    ``basedir`` variable's directory. Class path entries are prepended to
    PATH. A non-zero exit status is an evaluation failure; a clean exit
    yields a None result.
    """

    def __init__(self, executable: str = "bash"):
        self.executable = executable
        self._class_path: List[str] = []

    def set_class_path(self, class_path: Sequence[str]) -> None:
        for entry in class_path or []:
            entry = str(entry)
            if entry not in self._class_path:
                self._class_path.append(entry)

    def evaluate_script(
        self,
        script: str,
        variables: Optional[Mapping[str, Any]],
        script_output: Optional[TextIO],
    ) -> Any:
        variables = variables or {}

        env = os.environ.copy()
        env.update(_to_environment(variables))
        if self._class_path:
            env["PATH"] = os.pathsep.join([*self._class_path, env.get("PATH", "")])

        basedir = variables.get("basedir")
        cwd = str(basedir) if basedir is not None else None

        try:
            result = subprocess.run(
                [self.executable, "-c", f"set -euo pipefail\n{script}"],
                env=env,
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
            )
        except OSError as e:
            raise ScriptEvaluationError(e) from e

        if result.stdout:
            if script_output is not None:
                script_output.write(result.stdout)
                script_output.flush()
            else:
                print(result.stdout, end="")

        if result.returncode != 0:
            error = subprocess.CalledProcessError(
                result.returncode, self.executable, output=result.stdout
            )
            raise ScriptEvaluationError(error) from error

        return None


class InterpreterRegistry:
    """Interpreters keyed by lower-case file extension.

    Registration order is kept; the script locator probes extensions in
    that order. The fallback interpreter is always present.
    """

    def __init__(
        self,
        fallback: Optional[ScriptInterpreter] = None,
        fallback_id: str = DEFAULT_INTERPRETER,
    ):
        self._interpreters: Dict[str, ScriptInterpreter] = {}
        self.fallback_id = _normalize_extension(fallback_id)
        self.register(self.fallback_id, fallback or PythonScriptInterpreter())

    def register(self, extension: str, interpreter: ScriptInterpreter) -> None:
        """Register (or replace) the interpreter for an extension."""
        self._interpreters[_normalize_extension(extension)] = interpreter

    def resolve(self, filename) -> ScriptInterpreter:
        """Pick the interpreter for a script file by its extension.

        Extensions are matched case-insensitively; unknown or missing
        extensions resolve to the fallback interpreter.
        """
        extension = Path(filename).suffix[1:].lower()
        interpreter = self._interpreters.get(extension)
        if interpreter is None:
            interpreter = self._interpreters[self.fallback_id]
        return interpreter

    def extensions(self) -> List[str]:
        """Registered extensions in registration order."""
        return list(self._interpreters)

    def items(self) -> List[Tuple[str, ScriptInterpreter]]:
        return list(self._interpreters.items())

    def __iter__(self) -> Iterator[str]:
        return iter(self._interpreters)

    def __contains__(self, extension: str) -> bool:
        return _normalize_extension(extension) in self._interpreters

    def __len__(self) -> int:
        return len(self._interpreters)

    def close(self) -> None:
        """Close every registered interpreter once."""
        closed = set()
        for interpreter in self._interpreters.values():
            if id(interpreter) in closed:
                continue
            closed.add(id(interpreter))
            interpreter.close()


def _normalize_extension(extension: str) -> str:
    return extension.lstrip(".").lower()
