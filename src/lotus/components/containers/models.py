"""
Container Manager models.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from lotus.core.entities import Container
from lotus.core.errors import ContainerLifecycleError

LOCALHOST = "127.0.0.1"
HOST_GATEWAY_NAME = "host.docker.internal"
HOST_GATEWAY = "host-gateway"

DEFAULT_HEALTH_RETRIES = 10
DEFAULT_HEALTH_DELAY_SECONDS = 10.0


class HealthState(str, Enum):
    """States of the health check poll loop.

    There is no failed state: a failed check raises HealthCheckError.
    """

    STARTING = "starting"
    HEALTHY = "healthy"


@dataclass(frozen=True)
class PortLayout:
    """Container ports published on the loopback interface."""

    input_port: int
    api_port: int

    def bindings(self) -> dict[int, tuple[str, int]]:
        return {
            self.input_port: (LOCALHOST, self.input_port),
            self.api_port: (LOCALHOST, self.api_port),
        }


@dataclass
class ContainerLease:
    """A created container whose stop is guaranteed by running_container()."""

    container: Container
    started: bool = False
    teardown_error: ContainerLifecycleError | None = None
