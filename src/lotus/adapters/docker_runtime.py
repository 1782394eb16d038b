"""
Docker runtime adapter.

Implements ContainerRuntimePort with the Docker SDK's low-level API client,
which exposes the raw build event stream and the full inspect document.

Every SDK or socket failure is re-raised as RuntimeTransportError.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import docker
from docker.errors import DockerException

from lotus.core.errors import RuntimeTransportError
from lotus.core.ports.runtime import ContainerSpec

logger = logging.getLogger(__name__)


class DockerRuntime:
    def __init__(self, client: docker.APIClient) -> None:
        self._api = client

    @classmethod
    def from_env(cls) -> DockerRuntime:
        """Connect using DOCKER_HOST and friends, or the local socket."""
        try:
            client = docker.from_env()
        except DockerException as e:
            raise RuntimeTransportError(f"Connecting to the Docker API: {e}") from e
        return cls(client.api)

    def build_image(self, artifact: Path, tag: str) -> Iterator[Mapping[str, Any]]:
        try:
            with open(artifact, "rb") as context:
                yield from self._api.build(
                    fileobj=context,
                    custom_context=True,
                    tag=tag,
                    rm=True,
                    forcerm=True,
                    decode=True,
                )
        except (DockerException, OSError) as e:
            raise RuntimeTransportError(str(e)) from e

    def create_container(self, spec: ContainerSpec) -> str:
        try:
            host_config = self._api.create_host_config(
                port_bindings=dict(spec.port_bindings),
                extra_hosts=dict(spec.extra_hosts),
                auto_remove=spec.auto_remove,
            )
            # A non-detached container is created with stdout/stderr attached.
            response = self._api.create_container(
                image=spec.image_id,
                detach=not (spec.attach_stdout or spec.attach_stderr),
                ports=list(spec.port_bindings),
                host_config=host_config,
            )
        except (DockerException, OSError) as e:
            raise RuntimeTransportError(str(e)) from e
        for warning in response.get("Warnings") or []:
            logger.warning("Docker: %s", warning)
        return str(response["Id"])

    def start_container(self, container_id: str) -> None:
        try:
            self._api.start(container_id)
        except (DockerException, OSError) as e:
            raise RuntimeTransportError(str(e)) from e

    def stop_container(self, container_id: str) -> None:
        try:
            self._api.stop(container_id)
        except (DockerException, OSError) as e:
            raise RuntimeTransportError(str(e)) from e

    def inspect_health(self, container_id: str) -> str | None:
        try:
            inspect = self._api.inspect_container(container_id)
        except (DockerException, OSError) as e:
            raise RuntimeTransportError(str(e)) from e
        health = (inspect.get("State") or {}).get("Health") or {}
        status = health.get("Status")
        return str(status) if status else None
