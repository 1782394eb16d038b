"""
Containers component unit tests.

Tests for build stream handling, container declaration, the health check
state machine and guaranteed teardown.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import pytest

from lotus.components.containers import (
    ContainerManager,
    ContainerSpec,
    HealthState,
    PortLayout,
    consume_build_stream,
    running_container,
)
from lotus.core.entities import Container, Image
from lotus.core.errors import (
    BuildError,
    BuildStreamError,
    BuildTransportError,
    ContainerLifecycleError,
    HealthCheckError,
    RuntimeTransportError,
)

# --- Mock Implementations ---


class MockRuntime:
    """In-memory container runtime for testing."""

    def __init__(
        self,
        build_events: list[Mapping[str, Any]] | None = None,
        health: list[str | None] | None = None,
    ) -> None:
        self.build_events = build_events if build_events is not None else [
            {"stream": "Step 1/4 : FROM logstash\n"},
            {"aux": {"ID": "sha256:abc123"}},
            {"stream": "Successfully built abc123\n"},
        ]
        self.health = health if health is not None else ["healthy"]
        self.calls: list[tuple[str, Any]] = []
        self.specs: list[ContainerSpec] = []
        self.fail_on: set[str] = set()

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_on:
            raise RuntimeTransportError(f"{operation} refused")

    def build_image(self, artifact: Path, tag: str) -> Iterator[Mapping[str, Any]]:
        self.calls.append(("build", tag))
        self._maybe_fail("build")
        yield from self.build_events

    def create_container(self, spec: ContainerSpec) -> str:
        self.calls.append(("create", spec.image_id))
        self._maybe_fail("create")
        self.specs.append(spec)
        return "c0ffee0000000000000000"

    def start_container(self, container_id: str) -> None:
        self.calls.append(("start", container_id))
        self._maybe_fail("start")

    def stop_container(self, container_id: str) -> None:
        self.calls.append(("stop", container_id))
        self._maybe_fail("stop")

    def inspect_health(self, container_id: str) -> str | None:
        self.calls.append(("inspect", container_id))
        self._maybe_fail("inspect")
        if len(self.health) > 1:
            return self.health.pop(0)
        return self.health[0]

    def count(self, operation: str) -> int:
        return sum(1 for name, _ in self.calls if name == operation)


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


# --- Fixtures ---


@pytest.fixture
def runtime() -> MockRuntime:
    return MockRuntime()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def manager(runtime: MockRuntime, sleep: RecordingSleep) -> ContainerManager:
    return ContainerManager(runtime, PortLayout(input_port=5066, api_port=9600), sleep=sleep)


@pytest.fixture
def container() -> Container:
    return Container(id="c0ffee0000000000000000")


# --- Build stream ---


class TestConsumeBuildStream:
    def test_returns_image_id(self) -> None:
        events = [{"stream": "Step 1\n"}, {"aux": {"ID": "sha256:1"}}]

        assert consume_build_stream(events) == "sha256:1"

    def test_last_id_wins(self) -> None:
        events = [{"aux": {"ID": "sha256:1"}}, {"aux": {"ID": "sha256:2"}}]

        assert consume_build_stream(events) == "sha256:2"

    def test_structured_error(self) -> None:
        events = [
            {"stream": "Step 4/4 : RUN false\n"},
            {
                "error": "The command '/bin/sh -c false' returned a non-zero code: 1",
                "errorDetail": {"code": 1, "message": "returned a non-zero code: 1"},
            },
            {"aux": {"ID": "sha256:never"}},
        ]

        with pytest.raises(BuildStreamError) as exc:
            consume_build_stream(events)

        assert "non-zero code" in str(exc.value)
        assert exc.value.detail["code"] == 1

    def test_no_image_id(self) -> None:
        with pytest.raises(BuildError) as exc:
            consume_build_stream([{"stream": "Step 1\n"}, {"aux": {"Digest": "x"}}])

        assert not isinstance(exc.value, (BuildStreamError, BuildTransportError))


class TestBuildImage:
    async def test_build(self, manager: ContainerManager, runtime: MockRuntime) -> None:
        image = await manager.build_image(Path("image.tar"), "nausicaea/lotus-x:latest")

        assert image == Image(id="sha256:abc123", tag="nausicaea/lotus-x:latest")
        assert runtime.calls == [("build", "nausicaea/lotus-x:latest")]

    async def test_transport_failure(self, manager: ContainerManager, runtime: MockRuntime) -> None:
        runtime.fail_on.add("build")

        with pytest.raises(BuildTransportError):
            await manager.build_image(Path("image.tar"), "t")

    async def test_stream_failure_is_distinct(
        self, manager: ContainerManager, runtime: MockRuntime
    ) -> None:
        runtime.build_events = [{"error": "boom", "errorDetail": {"message": "boom"}}]

        with pytest.raises(BuildStreamError, match="boom"):
            await manager.build_image(Path("image.tar"), "t")


# --- Container declaration ---


class TestCreateContainer:
    async def test_declaration(self, manager: ContainerManager, runtime: MockRuntime) -> None:
        container = await manager.create_container(Image(id="sha256:abc"), auto_remove=True)

        assert container.id == "c0ffee0000000000000000"
        spec = runtime.specs[0]
        assert spec.image_id == "sha256:abc"
        assert spec.attach_stdout and spec.attach_stderr
        assert spec.port_bindings == {5066: ("127.0.0.1", 5066), 9600: ("127.0.0.1", 9600)}
        assert spec.extra_hosts == {"host.docker.internal": "host-gateway"}
        assert spec.auto_remove is True

    async def test_keep_container(self, manager: ContainerManager, runtime: MockRuntime) -> None:
        await manager.create_container(Image(id="sha256:abc"), auto_remove=False)

        assert runtime.specs[0].auto_remove is False

    async def test_create_failure(self, manager: ContainerManager, runtime: MockRuntime) -> None:
        runtime.fail_on.add("create")

        with pytest.raises(ContainerLifecycleError, match="Creating"):
            await manager.create_container(Image(id="sha256:abc"), auto_remove=True)

    async def test_start_failure(
        self, manager: ContainerManager, runtime: MockRuntime, container: Container
    ) -> None:
        runtime.fail_on.add("start")

        with pytest.raises(ContainerLifecycleError) as exc:
            await manager.start(container)

        assert exc.value.container_id == container.id


# --- Health check ---


class TestHealthCheck:
    async def test_healthy(
        self,
        manager: ContainerManager,
        runtime: MockRuntime,
        sleep: RecordingSleep,
        container: Container,
    ) -> None:
        state = await manager.health_check(container, retries=5, delay=2.0)

        assert state is HealthState.HEALTHY
        assert sleep.delays == []

    async def test_starting_then_healthy(
        self,
        manager: ContainerManager,
        runtime: MockRuntime,
        sleep: RecordingSleep,
        container: Container,
    ) -> None:
        runtime.health = ["starting", "starting", "healthy"]

        state = await manager.health_check(container, retries=5, delay=2.0)

        assert state is HealthState.HEALTHY
        assert runtime.count("inspect") == 3
        assert sleep.delays == [2.0, 2.0]

    async def test_retries_exhausted(
        self,
        manager: ContainerManager,
        runtime: MockRuntime,
        sleep: RecordingSleep,
        container: Container,
    ) -> None:
        runtime.health = ["starting"]

        with pytest.raises(HealthCheckError, match="after 4 retries"):
            await manager.health_check(container, retries=4, delay=0.5)

        assert runtime.count("inspect") == 4
        assert sleep.delays == [0.5, 0.5, 0.5]

    async def test_missing_health_field(
        self,
        manager: ContainerManager,
        runtime: MockRuntime,
        sleep: RecordingSleep,
        container: Container,
    ) -> None:
        runtime.health = [None]

        with pytest.raises(HealthCheckError, match="No Docker container health status"):
            await manager.health_check(container, retries=10, delay=1.0)

        assert runtime.count("inspect") == 1
        assert sleep.delays == []

    async def test_unhealthy(
        self,
        manager: ContainerManager,
        runtime: MockRuntime,
        sleep: RecordingSleep,
        container: Container,
    ) -> None:
        runtime.health = ["starting", "unhealthy"]

        with pytest.raises(HealthCheckError, match="unhealthy"):
            await manager.health_check(container, retries=10, delay=1.0)

        assert sleep.delays == [1.0]

    async def test_failure_is_raised_not_returned(
        self, manager: ContainerManager, runtime: MockRuntime, container: Container
    ) -> None:
        runtime.health = ["failed"]

        with pytest.raises(HealthCheckError, match="failed"):
            await manager.health_check(container, retries=3, delay=1.0)

        assert [state.value for state in HealthState] == ["starting", "healthy"]

    async def test_inspect_failure(
        self, manager: ContainerManager, runtime: MockRuntime, container: Container
    ) -> None:
        runtime.fail_on.add("inspect")

        with pytest.raises(HealthCheckError, match="Inspecting"):
            await manager.health_check(container, retries=3, delay=1.0)


# --- Teardown ---


class TestStop:
    async def test_stop(
        self, manager: ContainerManager, runtime: MockRuntime, container: Container
    ) -> None:
        assert await manager.stop(container) is None
        assert runtime.count("stop") == 1

    async def test_stop_failure_returned(
        self, manager: ContainerManager, runtime: MockRuntime, container: Container
    ) -> None:
        runtime.fail_on.add("stop")

        error = await manager.stop(container)

        assert isinstance(error, ContainerLifecycleError)
        assert isinstance(error.__cause__, RuntimeTransportError)


class TestRunningContainer:
    async def test_stopped_once_on_success(
        self, manager: ContainerManager, runtime: MockRuntime
    ) -> None:
        async with running_container(manager, Image(id="sha256:abc"), auto_remove=True) as lease:
            assert lease.started

        assert [name for name, _ in runtime.calls] == ["create", "start", "stop"]
        assert lease.teardown_error is None

    async def test_stopped_once_on_failure(
        self, manager: ContainerManager, runtime: MockRuntime
    ) -> None:
        with pytest.raises(HealthCheckError):
            async with running_container(
                manager, Image(id="sha256:abc"), auto_remove=True
            ) as lease:
                raise HealthCheckError("never healthy")

        assert runtime.count("stop") == 1

    async def test_stopped_when_start_fails(
        self, manager: ContainerManager, runtime: MockRuntime
    ) -> None:
        runtime.fail_on.add("start")

        with pytest.raises(ContainerLifecycleError):
            async with running_container(manager, Image(id="sha256:abc"), auto_remove=True):
                pass

        assert runtime.count("stop") == 1

    async def test_teardown_error_does_not_replace_outcome(
        self, manager: ContainerManager, runtime: MockRuntime
    ) -> None:
        runtime.fail_on.add("stop")

        with pytest.raises(HealthCheckError):
            async with running_container(
                manager, Image(id="sha256:abc"), auto_remove=True
            ) as lease:
                raise HealthCheckError("never healthy")

        assert isinstance(lease.teardown_error, ContainerLifecycleError)

    async def test_no_stop_when_create_fails(
        self, manager: ContainerManager, runtime: MockRuntime
    ) -> None:
        runtime.fail_on.add("create")

        with pytest.raises(ContainerLifecycleError):
            async with running_container(manager, Image(id="sha256:abc"), auto_remove=True):
                pass

        assert runtime.count("stop") == 0

    async def test_teardown_reported_when_start_fails(
        self, manager: ContainerManager, runtime: MockRuntime
    ) -> None:
        runtime.fail_on.update({"start", "stop"})
        reported: list[ContainerLifecycleError | None] = []

        with pytest.raises(ContainerLifecycleError, match="Starting"):
            async with running_container(
                manager, Image(id="sha256:abc"), auto_remove=True, on_teardown=reported.append
            ):
                pass

        assert len(reported) == 1
        assert isinstance(reported[0], ContainerLifecycleError)
        assert "Stopping" in str(reported[0])
