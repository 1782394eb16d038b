"""
Run Coordinator component - one complete test run.

Order of a run:
1. Open the event channel and start the Response Collector
2. Build the archive, then the image
3. Create and start the container, wait for it to become healthy
4. Run the Test Driver over every case
5. Stop the collector, close the channel, stop the container, join the
   collector task

Step 5 always runs. The first LotusError becomes RunOutput.error; container
stop and collector failures are reported in their own fields. Exceptions
that are not LotusErrors propagate once teardown has finished.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

import httpx

from lotus.components.archive import ArchiveBuilder, BuildArchiveInput
from lotus.components.collector import ResponseCollector
from lotus.components.containers import ContainerManager, running_container
from lotus.components.driver import TestDriver, input_url
from lotus.components.driver.component import DEFAULT_REQUEST_TIMEOUT_SECONDS
from lotus.components.runner.models import RunOutput, RunPlan
from lotus.core.channel import EventReceiver, open_channel
from lotus.core.errors import ContainerLifecycleError, LotusError

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], httpx.AsyncClient]


def default_client() -> httpx.AsyncClient:
    """HTTP client for the engine input; proxies from the environment are ignored."""
    return httpx.AsyncClient(trust_env=False, timeout=DEFAULT_REQUEST_TIMEOUT_SECONDS)


class RunCoordinator:
    """Runs the collector and the driver side by side and owns teardown."""

    def __init__(
        self,
        builder: ArchiveBuilder,
        manager: ContainerManager,
        client_factory: ClientFactory = default_client,
        collector_log_level: str = "warning",
    ) -> None:
        self._builder = builder
        self._manager = manager
        self._client_factory = client_factory
        self._collector_log_level = collector_log_level

    async def run(self, plan: RunPlan) -> RunOutput:
        output = RunOutput()
        sender, receiver = open_channel(plan.channel_capacity)
        collector = ResponseCollector(
            sender,
            host=plan.collector_host,
            port=plan.context.output_port,
            log_level=self._collector_log_level,
        )
        collector_task = asyncio.create_task(collector.serve(), name="lotus-collector")
        driver: TestDriver | None = None

        def record_teardown(error: ContainerLifecycleError | None) -> None:
            output.teardown_error = error

        try:
            await collector.wait_started(collector_task)

            archive = await asyncio.to_thread(
                self._builder.build,
                BuildArchiveInput(
                    cache_dir=plan.cache_dir,
                    rules=plan.rules,
                    scripts=plan.scripts,
                    patterns=plan.patterns,
                    context=plan.context,
                ),
            )
            image = await self._manager.build_image(archive.archive_path, plan.image_tag)

            async with running_container(
                self._manager, image, auto_remove=plan.auto_remove, on_teardown=record_teardown
            ) as lease:
                try:
                    await self._manager.health_check(
                        lease.container, plan.health_retries, plan.health_delay
                    )
                    async with self._client_factory() as client:
                        driver = TestDriver(
                            client,
                            receiver,
                            input_url(plan.engine_host, plan.context.input_port),
                            event_timeout=plan.event_timeout,
                        )
                        await driver.run(plan.test_cases)
                finally:
                    self._release(collector, receiver)
        except LotusError as e:
            output.error = e
            logger.error("Run failed: %s", e.__class__.__name__)
        finally:
            self._release(collector, receiver)
            collector_error = await self._join(collector_task)
            if collector_error is not None and collector_error is not output.error:
                output.collector_error = collector_error
            if driver is not None:
                output.results = list(driver.results)

        logger.info(
            "Run finished: %d case(s) attempted, success=%s",
            len(output.results),
            output.success,
        )
        return output

    @staticmethod
    def _release(collector: ResponseCollector, receiver: EventReceiver) -> None:
        collector.stop()
        receiver.close()

    @staticmethod
    async def _join(task: asyncio.Task[None]) -> LotusError | None:
        try:
            await task
        except LotusError as e:
            logger.warning("Event collector failed: %s", e)
            return e
        return None
