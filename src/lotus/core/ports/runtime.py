"""
Container runtime port.

Capability interface the Container Manager depends on instead of a concrete
runtime client. The Docker SDK adapter implements it for real runs; tests
use an in-memory fake.

Calls are blocking. Implementations raise RuntimeTransportError when the
runtime cannot be reached or rejects a request.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol


@dataclass(frozen=True)
class ContainerSpec:
    """Declaration of the container to create."""

    image_id: str
    attach_stdout: bool = True
    attach_stderr: bool = True
    # container port -> (host ip, host port)
    port_bindings: dict[int, tuple[str, int]] = field(default_factory=dict)
    extra_hosts: dict[str, str] = field(default_factory=dict)
    auto_remove: bool = True


class ContainerRuntimePort(Protocol):
    """Protocol for the container runtime operations a run needs."""

    def build_image(self, artifact: Path, tag: str) -> Iterable[Mapping[str, Any]]:
        """
        Send the tar build context and return the build event stream.

        Events follow the Docker build stream shape: progress lines under
        "stream", the image identifier under "aux" -> "ID", structured
        failures under "error" / "errorDetail".
        """
        ...

    def create_container(self, spec: ContainerSpec) -> str:
        """Create a container and return its identifier."""
        ...

    def start_container(self, container_id: str) -> None:
        """Start a created container."""
        ...

    def stop_container(self, container_id: str) -> None:
        """Stop a running container."""
        ...

    def inspect_health(self, container_id: str) -> str | None:
        """Return the reported health status, or None if there is none."""
        ...
