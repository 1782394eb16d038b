"""
Archive Builder input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# --- Fixed artifact names ---

IMAGE_ARCHIVE_NAME = "image.tar"
PIPELINE_NAME = "logstash.conf"
INPUT_TEMPLATE_NAME = "input.conf"
OUTPUT_TEMPLATE_NAME = "output.conf"
SCRIPTS_DIR = "scripts"
PATTERNS_DIR = "patterns"
PLACEHOLDER_NAME = ".keep"


# --- Template Context ---


@dataclass(frozen=True)
class BuildContext:
    """Named parameters every template is rendered against."""

    input_port: int = 5066
    output_port: int = 5067
    api_port: int = 9600
    output_host: str = "host.docker.internal"
    pipeline_name: str = PIPELINE_NAME
    scripts_dir: str = SCRIPTS_DIR
    patterns_dir: str = PATTERNS_DIR

    def as_template_vars(self) -> dict[str, Any]:
        return {
            "input_port": self.input_port,
            "output_port": self.output_port,
            "api_port": self.api_port,
            "output_host": self.output_host,
            "pipeline_name": self.pipeline_name,
            "scripts_dir": self.scripts_dir,
            "patterns_dir": self.patterns_dir,
        }


# --- Input / Output ---


@dataclass(frozen=True)
class BuildArchiveInput:
    """Everything that goes into one build artifact."""

    cache_dir: Path
    rules: list[Path]
    scripts: list[Path] = field(default_factory=list)
    patterns: list[Path] = field(default_factory=list)
    context: BuildContext = field(default_factory=BuildContext)


@dataclass(frozen=True)
class BuildArchiveOutput:
    """Paths of the finished artifact and its staged pipeline file."""

    archive_path: Path
    pipeline_path: Path
    members: tuple[str, ...]
