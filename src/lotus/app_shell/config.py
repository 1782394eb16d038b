"""
Environment-derived settings and per-project naming.

Each target project gets its own cache directory and image tag, both keyed
by a hash of the project's resolved path, so runs for different projects
never share build artifacts.
"""

from __future__ import annotations

import hashlib
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

APP_NAME = "lotus"
HASH_LENGTH = 16


# --- Settings ---
@dataclass(frozen=True)
class Settings:
    cache_root: Path

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        if env.get("LOTUS_CACHE_DIR"):
            return cls(cache_root=Path(env["LOTUS_CACHE_DIR"]))
        if env.get("XDG_CACHE_HOME"):
            return cls(cache_root=Path(env["XDG_CACHE_HOME"]) / APP_NAME)
        return cls(cache_root=Path.home() / ".cache" / APP_NAME)


def project_hash(target: Path) -> str:
    digest = hashlib.sha256(str(target.resolve()).encode("utf-8")).hexdigest()
    return digest[:HASH_LENGTH]


def project_cache_dir(settings: Settings, target: Path) -> Path:
    return settings.cache_root / project_hash(target)


def image_tag(namespace: str, target: Path) -> str:
    return f"{namespace}/{APP_NAME}-{project_hash(target)}:latest"
