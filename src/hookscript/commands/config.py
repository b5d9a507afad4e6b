# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Config command for hookscript.

Provides basic configuration validation.
"""

import typer

from hookscript.config import ConfigError, load_config

app = typer.Typer(help="Manage and validate configuration")


@app.command()
def validate(
    config_path: str = typer.Option(None, "--config", "-c", help="Path to config file"),
):
    """
    Validate configuration file.

    Checks that the config file exists, is valid YAML and that known keys
    have the expected types.
    """
    typer.echo("Validating configuration...")
    typer.echo()

    try:
        config = load_config(config_path)
    except ConfigError as e:
        typer.echo(f"Validation failed: {e}", err=True)
        raise typer.Exit(1)

    typer.echo("Configuration structure is valid")
    typer.echo()
    if config.get("encoding"):
        typer.echo(f"Encoding: {config['encoding']}")
    if config.get("log_file"):
        typer.echo(f"Log file: {config['log_file']}")
    for entry in config.get("class_path") or []:
        typer.echo(f"Class path: {entry}")
    for name in sorted(config.get("globals") or {}):
        typer.echo(f"Global: {name}")
    typer.echo()
    typer.echo("Configuration validation complete!")
