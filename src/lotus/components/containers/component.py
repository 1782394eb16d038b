"""
Container Manager component - image build and container lifecycle.

Wraps a ContainerRuntimePort. Runtime calls block, so each one runs in a
worker thread and the event loop (and the Response Collector on it) stays
responsive while Docker works.

Invariants:
- Readiness is only ever observed, never assumed: a missing or unexpected
  health status fails the check immediately
- stop() never raises; its error is returned so it cannot replace the
  outcome of the run
- running_container() stops the container exactly once on every exit path
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable, Mapping
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, TypeVar

from lotus.components.containers.models import (
    HOST_GATEWAY,
    HOST_GATEWAY_NAME,
    ContainerLease,
    HealthState,
    PortLayout,
)
from lotus.components.containers.ports import ContainerRuntimePort, ContainerSpec
from lotus.core.entities import Container, Image
from lotus.core.errors import (
    BuildError,
    BuildStreamError,
    BuildTransportError,
    ContainerLifecycleError,
    HealthCheckError,
    RuntimeTransportError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
SleepFn = Callable[[float], Awaitable[None]]


def consume_build_stream(events: Iterable[Mapping[str, Any]]) -> str:
    """
    Read a build event stream to the end and return the image identifier.

    The last identifier reported wins.
    """
    image_id: str | None = None
    for event in events:
        if "error" in event or "errorDetail" in event:
            detail = event.get("errorDetail") or {}
            message = event.get("error") or detail.get("message") or "unknown build error"
            raise BuildStreamError(str(message).strip(), dict(detail))
        aux = event.get("aux")
        if isinstance(aux, Mapping) and aux.get("ID"):
            image_id = str(aux["ID"])
        line = event.get("stream")
        if isinstance(line, str) and line.strip():
            logger.debug("build: %s", line.rstrip())
    if image_id is None:
        raise BuildError("No container image ID was found in the build output")
    return image_id


class ContainerManager:
    """Builds the engine image and manages the one container of a run."""

    def __init__(
        self,
        runtime: ContainerRuntimePort,
        ports: PortLayout,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._runtime = runtime
        self._ports = ports
        self._sleep = sleep

    async def _call(self, fn: Callable[..., T], *args: Any) -> T:
        return await asyncio.to_thread(fn, *args)

    async def build_image(self, artifact: Path, tag: str) -> Image:
        """
        Build the image from a tar build context.

        Raises:
            BuildStreamError: the build itself failed.
            BuildTransportError: the runtime could not be reached.
            BuildError: the stream ended without an image identifier.
        """
        logger.info("Building the container image %s", tag)

        def _build() -> str:
            return consume_build_stream(self._runtime.build_image(artifact, tag))

        try:
            image_id = await self._call(_build)
        except RuntimeTransportError as e:
            raise BuildTransportError(f"Sending the build context to the runtime: {e}") from e
        logger.info("Built image %s", image_id)
        return Image(id=image_id, tag=tag)

    async def create_container(self, image: Image, auto_remove: bool) -> Container:
        spec = ContainerSpec(
            image_id=image.id,
            attach_stdout=True,
            attach_stderr=True,
            port_bindings=self._ports.bindings(),
            extra_hosts={HOST_GATEWAY_NAME: HOST_GATEWAY},
            auto_remove=auto_remove,
        )
        try:
            container_id = await self._call(self._runtime.create_container, spec)
        except RuntimeTransportError as e:
            raise ContainerLifecycleError(f"Creating the Docker container: {e}") from e
        container = Container(id=container_id)
        logger.info("Created container %s (auto remove: %s)", container.short_id, auto_remove)
        return container

    async def start(self, container: Container) -> None:
        try:
            await self._call(self._runtime.start_container, container.id)
        except RuntimeTransportError as e:
            raise ContainerLifecycleError(
                f"Starting the Docker container: {e}", container.id
            ) from e
        logger.info("Started container %s", container.short_id)

    async def health_check(self, container: Container, retries: int, delay: float) -> HealthState:
        """
        Poll the container until it reports itself healthy.

        "starting" is polled up to retries times with delay seconds between
        polls. Anything else that is not "healthy" fails at once.
        """
        attempts = 0
        while True:
            try:
                status = await self._call(self._runtime.inspect_health, container.id)
            except RuntimeTransportError as e:
                raise HealthCheckError(f"Inspecting the Docker container: {e}") from e

            if status == HealthState.HEALTHY.value:
                logger.info("Container %s is healthy", container.short_id)
                return HealthState.HEALTHY
            if status == HealthState.STARTING.value:
                attempts += 1
                if attempts >= retries:
                    raise HealthCheckError(
                        "Failed to determine the Docker container health status "
                        f"after {retries} retries"
                    )
                logger.debug(
                    "Container %s still starting (attempt %d/%d)",
                    container.short_id,
                    attempts,
                    retries,
                )
                await self._sleep(delay)
                continue
            if status is None:
                raise HealthCheckError("No Docker container health status was found")
            raise HealthCheckError(f"Unexpected Docker container health status '{status}'")

    async def stop(self, container: Container) -> ContainerLifecycleError | None:
        """Stop the container. Returns the failure instead of raising it."""
        try:
            await self._call(self._runtime.stop_container, container.id)
        except RuntimeTransportError as e:
            error = ContainerLifecycleError(f"Stopping the Docker container: {e}", container.id)
            error.__cause__ = e
            logger.warning("%s", error)
            return error
        logger.info("Stopped container %s", container.short_id)
        return None


@asynccontextmanager
async def running_container(
    manager: ContainerManager,
    image: Image,
    *,
    auto_remove: bool,
    on_teardown: Callable[[ContainerLifecycleError | None], None] | None = None,
) -> AsyncIterator[ContainerLease]:
    """
    Create and start a container, and always stop it on the way out.

    The stop failure, if any, is left on lease.teardown_error and passed to
    on_teardown, which also runs when start() fails before a lease is yielded.
    """
    container = await manager.create_container(image, auto_remove=auto_remove)
    lease = ContainerLease(container=container)
    try:
        await manager.start(container)
        lease.started = True
        yield lease
    finally:
        lease.teardown_error = await manager.stop(container)
        if on_teardown is not None:
            on_teardown(lease.teardown_error)
