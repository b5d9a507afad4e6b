"""Script path resolution.

Hook scripts may be referenced without an extension ("verify"); the
locator probes each registered extension to find the actual file.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

from pathlib import Path
from typing import Iterable, Optional, Union

PathLike = Union[str, Path]


def resolve_script(script_file: Optional[PathLike], extensions: Iterable[str]) -> Optional[Path]:
    """Get the effective path of a script file.

    If the file exists as given it is returned unchanged. Otherwise
    ``<script_file>.<ext>`` is tried for each extension, in order, and the
    first existing candidate wins.

    Args:
        script_file: Script path, possibly without extension. May be None.
        extensions: Extensions to probe (without leading dot).

    Returns:
        The resolved path, the unchanged (non-existent) path if nothing
        matched, or None if ``script_file`` was None.
    """
    if script_file is None:
        return None

    script_file = Path(script_file)
    if script_file.exists():
        return script_file

    for ext in extensions:
        candidate = Path(f"{script_file}.{ext}")
        if candidate.exists():
            return candidate

    return script_file


def resolve_by_name(
    basedir: PathLike,
    relative_script_path: Optional[str],
    extensions: Iterable[str],
) -> Optional[Path]:
    """Resolve a script given by logical name relative to a base directory.

    Returns:
        Resolved path (which may not exist), or None when there is no
        script name and nothing should run.
    """
    if relative_script_path is None:
        return None
    return resolve_script(Path(basedir) / relative_script_path, extensions)


def resolve_by_path(script_file: PathLike) -> Path:
    """Use an explicit script path as-is; no extension probing."""
    return Path(script_file)
