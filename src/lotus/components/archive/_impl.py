"""
Template rendering and deterministic tar helpers for the Archive Builder.

Rendering is strict: a template that references a parameter the context
does not define fails instead of rendering an empty string.

Every tar entry gets the same metadata regardless of the source file's
owner, permissions or timestamps, so identical inputs always produce an
identical archive.
"""

from __future__ import annotations

import io
import tarfile
from pathlib import Path
from typing import Any, BinaryIO

from jinja2 import Environment, StrictUndefined, TemplateError, UndefinedError

from lotus.core.errors import ConfigurationError, FileAccessError

FILE_MODE = 0o644
DIR_MODE = 0o755
FIXED_MTIME = 0


# --- Rendering ---


def _environment() -> Environment:
    return Environment(
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )


def render_template(name: str, source: str, variables: dict[str, Any]) -> bytes:
    """Render one template to UTF-8 bytes."""
    try:
        return _environment().from_string(source).render(variables).encode("utf-8")
    except UndefinedError as e:
        raise ConfigurationError(f"Unresolved parameter in template {name}: {e.message}") from e
    except TemplateError as e:
        raise ConfigurationError(f"Rendering the template {name}: {e}") from e


# --- Source files ---


def base_name(path: Path, kind: str) -> str:
    """Return the file name a source file is stored under in the archive."""
    name = path.name
    if not name or name in (".", ".."):
        raise ConfigurationError(f"Cannot determine the file name of the {kind} file: {path}")
    return name


def read_source(path: Path, kind: str) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise FileAccessError(f"Reading the {kind} file", path) from e


def write_staging(path: Path, data: bytes) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        raise FileAccessError("Writing the staging file", path) from e


# --- Tar entries ---


def _stable_info(name: str, kind: bytes, mode: int, size: int = 0) -> tarfile.TarInfo:
    info = tarfile.TarInfo(name)
    info.type = kind
    info.mode = mode
    info.size = size
    info.mtime = FIXED_MTIME
    info.uid = 0
    info.gid = 0
    info.uname = ""
    info.gname = ""
    return info


def add_file(archive: tarfile.TarFile, name: str, data: bytes) -> None:
    info = _stable_info(name, tarfile.REGTYPE, FILE_MODE, len(data))
    archive.addfile(info, io.BytesIO(data))


def add_directory(archive: tarfile.TarFile, name: str) -> None:
    archive.addfile(_stable_info(name, tarfile.DIRTYPE, DIR_MODE))


def open_archive(fileobj: BinaryIO) -> tarfile.TarFile:
    # Uncompressed: gzip headers carry a timestamp.
    return tarfile.open(fileobj=fileobj, mode="w", format=tarfile.PAX_FORMAT)
