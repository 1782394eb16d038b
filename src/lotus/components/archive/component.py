"""
Archive Builder component - assembles the Docker build context.

Invariants:
- The pipeline is render(input) + raw bytes of each rule in the given
  order + render(output), with the rules never modified
- scripts/ and patterns/ always exist in the archive, even when empty
- Identical inputs produce a byte-identical archive

Staging copies of every rendered file are left in the cache directory so a
failing build can be inspected.
"""

from __future__ import annotations

import logging
from pathlib import Path

from lotus.components.archive._impl import (
    add_directory,
    add_file,
    base_name,
    open_archive,
    read_source,
    render_template,
    write_staging,
)
from lotus.components.archive.models import (
    IMAGE_ARCHIVE_NAME,
    INPUT_TEMPLATE_NAME,
    OUTPUT_TEMPLATE_NAME,
    PLACEHOLDER_NAME,
    BuildArchiveInput,
    BuildArchiveOutput,
    BuildContext,
)
from lotus.components.archive.ports import TemplateSourcePort
from lotus.core.errors import ConfigurationError, FileAccessError

logger = logging.getLogger(__name__)


class ArchiveBuilder:
    """Renders templates and packs the pipeline into a build artifact."""

    def __init__(self, templates: TemplateSourcePort) -> None:
        self._templates = templates

    def assemble_pipeline(self, rules: list[Path], context: BuildContext) -> bytes:
        """Return the complete pipeline definition."""
        variables = context.as_template_vars()
        parts = [self._render_stage(INPUT_TEMPLATE_NAME, variables)]
        for rule in rules:
            base_name(rule, "rule")
            parts.append(read_source(rule, "rule"))
        parts.append(self._render_stage(OUTPUT_TEMPLATE_NAME, variables))
        return b"".join(parts)

    def build(self, inp: BuildArchiveInput) -> BuildArchiveOutput:
        """
        Write the build artifact to the cache directory.

        Raises:
            ConfigurationError: unresolved template parameter or unusable file name.
            FileAccessError: a rule, script or pattern could not be read.
        """
        context = inp.context
        variables = context.as_template_vars()
        members: list[str] = []

        staged: list[tuple[str, bytes]] = []
        for name, source in sorted(self._templates.config_templates().items()):
            rendered = render_template(name, source, variables)
            write_staging(inp.cache_dir / name, rendered)
            staged.append((name, rendered))

        pipeline = self.assemble_pipeline(inp.rules, context)
        pipeline_path = inp.cache_dir / context.pipeline_name
        write_staging(pipeline_path, pipeline)
        staged.append((context.pipeline_name, pipeline))

        auxiliary = [
            (context.scripts_dir, self._load_auxiliary(inp.scripts, "script")),
            (context.patterns_dir, self._load_auxiliary(inp.patterns, "pattern")),
        ]

        archive_path = inp.cache_dir / IMAGE_ARCHIVE_NAME
        try:
            with open(archive_path, "wb") as fh, open_archive(fh) as archive:
                for name, data in staged:
                    add_file(archive, name, data)
                    members.append(name)
                for directory, files in auxiliary:
                    add_directory(archive, directory)
                    add_file(archive, f"{directory}/{PLACEHOLDER_NAME}", b"")
                    members.extend([directory, f"{directory}/{PLACEHOLDER_NAME}"])
                    for name, data in files:
                        add_file(archive, f"{directory}/{name}", data)
                        members.append(f"{directory}/{name}")
        except OSError as e:
            raise FileAccessError("Writing the container image tar archive", archive_path) from e

        logger.info(
            "Built image archive %s (%d rules, %d scripts, %d patterns)",
            archive_path,
            len(inp.rules),
            len(inp.scripts),
            len(inp.patterns),
        )
        return BuildArchiveOutput(
            archive_path=archive_path,
            pipeline_path=pipeline_path,
            members=tuple(members),
        )

    def _render_stage(self, name: str, variables: dict[str, object]) -> bytes:
        try:
            source = self._templates.pipeline_template(name)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Missing pipeline template: {name}") from e
        return render_template(name, source, variables)

    def _load_auxiliary(self, paths: list[Path], kind: str) -> list[tuple[str, bytes]]:
        files: list[tuple[str, bytes]] = []
        seen: set[str] = set()
        for path in paths:
            name = base_name(path, kind)
            if name == PLACEHOLDER_NAME or name in seen:
                raise ConfigurationError(f"Duplicate {kind} file name: {name}")
            seen.add(name)
            files.append((name, read_source(path, kind)))
        return files


def run_build(inp: BuildArchiveInput, *, templates: TemplateSourcePort) -> BuildArchiveOutput:
    """Build the artifact described by inp."""
    return ArchiveBuilder(templates).build(inp)
