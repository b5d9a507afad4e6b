# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Main CLI entry point for hookscript.

Runs a single hook script and maps its outcome to an exit code:
0 passed (or nothing to run), 1 read/evaluation error, 2 failing result.
"""

import json
import logging
from pathlib import Path
from typing import Callable, List, Optional

import typer

from hookscript import __version__
from hookscript.config import ConfigError, load_config
from hookscript.scripts import (
    FileLogger,
    ScriptEvaluationError,
    ScriptReadError,
    ScriptReturnError,
    ScriptRunner,
)


app = typer.Typer(
    name="hookscript",
    help="Run pre-/post-build hook scripts and check their result",
    no_args_is_help=True,
)


def _parse_kv_args(args: Optional[List[str]]) -> dict:
    """Parse key=value arguments into a dict.

    Supports:
    - Booleans: true, false
    - Nulls: null, none
    - Numbers: integers and floats
    - JSON: values starting with { or [ are parsed as JSON
    - Strings: everything else
    """
    if not args:
        return {}
    result = {}
    for arg in args:
        if "=" not in arg:
            raise typer.BadParameter(f"expected key=value, got: {arg}")
        key, value = arg.split("=", 1)
        if value.lower() == "true":
            result[key] = True
        elif value.lower() == "false":
            result[key] = False
        elif value.lower() == "null" or value.lower() == "none":
            result[key] = None
        elif value.startswith("{") or value.startswith("["):
            try:
                result[key] = json.loads(value)
            except json.JSONDecodeError:
                result[key] = value
        else:
            try:
                result[key] = int(value)
            except ValueError:
                try:
                    result[key] = float(value)
                except ValueError:
                    result[key] = value
    return result


def _build_runner(
    config: dict,
    encoding: Optional[str],
    class_path: Optional[List[str]],
    global_vars: Optional[List[str]],
) -> ScriptRunner:
    runner = ScriptRunner.from_config(config)
    if encoding:
        runner.set_script_encoding(encoding)
    if class_path:
        runner.set_class_path(runner.class_path + class_path)
    for name, value in _parse_kv_args(global_vars).items():
        runner.set_global_variable(name, value)
    return runner


def _execute(
    run: Callable[[ScriptRunner, FileLogger], None],
    config_path: Optional[str],
    log_file: Optional[Path],
    encoding: Optional[str],
    class_path: Optional[List[str]],
    global_vars: Optional[List[str]],
    quiet: bool,
) -> None:
    try:
        config = load_config(config_path)
    except ConfigError as e:
        typer.echo(f"Config error: {e}", err=True)
        raise typer.Exit(1)

    if log_file is None and config.get("log_file"):
        log_file = Path(config["log_file"])

    mirror = None if quiet else typer.echo

    runner = _build_runner(config, encoding, class_path, global_vars)
    try:
        with runner, FileLogger(log_file, mirror) as logger:
            run(runner, logger)
    except ScriptReturnError as e:
        typer.echo(f"Failed: {e}", err=True)
        raise typer.Exit(2)
    except ScriptEvaluationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except ScriptReadError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Run pre-/post-build hook scripts and check their result."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


@app.command()
def run(
    description: str = typer.Argument(..., help="Description used in logs, e.g. 'pre-build script'"),
    basedir: Path = typer.Argument(..., help="Directory the script name is relative to"),
    name: str = typer.Argument(..., help="Script name, extension optional (e.g. verify)"),
    context: Optional[List[str]] = typer.Argument(None, help="key=value entries for the shared context"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", "-l", help="Write script output to this file"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config file"),
    encoding: Optional[str] = typer.Option(None, "--encoding", help="Script file encoding"),
    class_path: Optional[List[str]] = typer.Option(None, "--class-path", help="Extra path for scripts (repeatable)"),
    global_vars: Optional[List[str]] = typer.Option(None, "--global", "-g", help="name=value global variable (repeatable)"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not echo script output"),
):
    """Run a hook script by name, probing registered extensions.

    Examples:
        hookscript run "post-build script" it/project verify
        hookscript run "setup script" it/project setup buildNumber=42 -l target/setup.log
    """
    shared = _parse_kv_args(context)

    _execute(
        lambda runner, logger: runner.run(description, basedir, name, shared, logger),
        config_path,
        log_file,
        encoding,
        class_path,
        global_vars,
        quiet,
    )


@app.command("run-file")
def run_file(
    description: str = typer.Argument(..., help="Description used in logs"),
    script_file: Path = typer.Argument(..., help="Path to the script file"),
    context: Optional[List[str]] = typer.Argument(None, help="key=value entries for the shared context"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", "-l", help="Write script output to this file"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config file"),
    encoding: Optional[str] = typer.Option(None, "--encoding", help="Script file encoding"),
    class_path: Optional[List[str]] = typer.Option(None, "--class-path", help="Extra path for scripts (repeatable)"),
    global_vars: Optional[List[str]] = typer.Option(None, "--global", "-g", help="name=value global variable (repeatable)"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not echo script output"),
):
    """Run a hook script given by its exact path."""
    shared = _parse_kv_args(context)

    _execute(
        lambda runner, logger: runner.run_file(description, script_file, shared, logger),
        config_path,
        log_file,
        encoding,
        class_path,
        global_vars,
        quiet,
    )


@app.command()
def interpreters():
    """List registered interpreters in extension probe order."""
    with ScriptRunner() as runner:
        registry = runner.registry
        for extension, interpreter in registry.items():
            marker = " (default)" if extension == registry.fallback_id else ""
            typer.echo(f"{extension}\t{type(interpreter).__name__}{marker}")


@app.command()
def version():
    """Show version information."""
    typer.echo(f"hookscript version {__version__}")


# Static commands (config)
from hookscript.commands import config

app.add_typer(config.app, name="config")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
