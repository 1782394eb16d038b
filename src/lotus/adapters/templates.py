"""
Packaged template store.

Reads the Logstash configuration and pipeline templates shipped inside the
lotus.assets package. Templates are returned as raw text; rendering is the
Archive Builder's job.
"""

from __future__ import annotations

from importlib import resources
from importlib.resources.abc import Traversable

ASSETS_PACKAGE = "lotus.assets"
CONFIG_DIR = "config"
PIPELINE_DIR = "pipeline"


class PackagedTemplateStore:
    def __init__(self, package: str = ASSETS_PACKAGE) -> None:
        self._root: Traversable = resources.files(package)

    def config_templates(self) -> dict[str, str]:
        """Return every configuration template keyed by its file name."""
        templates: dict[str, str] = {}
        for entry in self._root.joinpath(CONFIG_DIR).iterdir():
            if entry.is_file():
                templates[entry.name] = entry.read_text(encoding="utf-8")
        return dict(sorted(templates.items()))

    def pipeline_template(self, name: str) -> str:
        """Return a pipeline stage template. Raises FileNotFoundError."""
        entry = self._root.joinpath(PIPELINE_DIR).joinpath(name)
        if not entry.is_file():
            raise FileNotFoundError(f"Pipeline template not found: {name}")
        return entry.read_text(encoding="utf-8")
