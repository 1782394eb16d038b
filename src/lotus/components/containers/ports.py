"""Container Manager port definitions."""

from lotus.core.ports.runtime import ContainerRuntimePort, ContainerSpec

__all__ = ["ContainerRuntimePort", "ContainerSpec"]
