"""Archive Builder port definitions."""

from lotus.core.ports.templates import TemplateSourcePort

__all__ = ["TemplateSourcePort"]
