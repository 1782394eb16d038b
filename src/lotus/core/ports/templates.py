from typing import Protocol


class TemplateSourcePort(Protocol):
    def config_templates(self) -> dict[str, str]:
        """Return every configuration template keyed by its file name."""
        ...

    def pipeline_template(self, name: str) -> str:
        """Return a pipeline stage template. Raises FileNotFoundError."""
        ...
