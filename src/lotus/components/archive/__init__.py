"""
Archive component - deterministic Docker build context for the engine under test.
"""

from .component import ArchiveBuilder, run_build
from .models import (
    IMAGE_ARCHIVE_NAME,
    PIPELINE_NAME,
    BuildArchiveInput,
    BuildArchiveOutput,
    BuildContext,
)
from .ports import TemplateSourcePort

__all__ = [
    # Entry points
    "ArchiveBuilder",
    "run_build",
    # Models
    "BuildArchiveInput",
    "BuildArchiveOutput",
    "BuildContext",
    "IMAGE_ARCHIVE_NAME",
    "PIPELINE_NAME",
    # Ports
    "TemplateSourcePort",
]
