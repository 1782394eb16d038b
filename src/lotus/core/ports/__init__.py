from lotus.core.ports.runtime import ContainerRuntimePort, ContainerSpec
from lotus.core.ports.templates import TemplateSourcePort

__all__ = ["ContainerRuntimePort", "ContainerSpec", "TemplateSourcePort"]
