"""
Containers component - image build, container lifecycle and health gating.
"""

from .component import ContainerManager, consume_build_stream, running_container
from .models import (
    DEFAULT_HEALTH_DELAY_SECONDS,
    DEFAULT_HEALTH_RETRIES,
    LOCALHOST,
    ContainerLease,
    HealthState,
    PortLayout,
)
from .ports import ContainerRuntimePort, ContainerSpec

__all__ = [
    # Entry points
    "ContainerManager",
    "consume_build_stream",
    "running_container",
    # Models
    "ContainerLease",
    "HealthState",
    "PortLayout",
    "DEFAULT_HEALTH_DELAY_SECONDS",
    "DEFAULT_HEALTH_RETRIES",
    "LOCALHOST",
    # Ports
    "ContainerRuntimePort",
    "ContainerSpec",
]
