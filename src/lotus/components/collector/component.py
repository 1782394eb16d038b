"""
Response Collector component - ingress listener for engine output events.

Serves the event route with uvicorn on one fixed port for the whole run.
There is no per-test-case signal: the collector forwards every event it
receives and relies on the test driver consuming exactly one per fixture.

Key behaviors:
- The listening socket is bound before serving, so a port clash raises
  CommunicationError instead of exiting the process
- A failure to enqueue shuts the listener down and serve() raises
- When serve() returns for any reason the channel sender is closed, so a
  driver waiting for an event sees "no output produced" instead of hanging
"""

from __future__ import annotations

import asyncio
import logging
import socket

import uvicorn
from fastapi import FastAPI

from lotus.api.main import create_app
from lotus.core.channel import EventSender
from lotus.core.errors import CommunicationError

logger = logging.getLogger(__name__)

DEFAULT_COLLECTOR_HOST = "0.0.0.0"
DEFAULT_COLLECTOR_PORT = 5067
STARTUP_POLL_SECONDS = 0.05


class ResponseCollector:
    """Receives output events from the engine and forwards them to the driver."""

    def __init__(
        self,
        sender: EventSender,
        host: str = DEFAULT_COLLECTOR_HOST,
        port: int = DEFAULT_COLLECTOR_PORT,
        log_level: str = "warning",
    ) -> None:
        self._sender = sender
        self._host = host
        self._port = port
        self._failure: Exception | None = None
        self._socket: socket.socket | None = None
        self.app: FastAPI = create_app(sender, self.fail)
        self._server = uvicorn.Server(
            uvicorn.Config(
                self.app,
                host=host,
                port=port,
                log_level=log_level,
                lifespan="off",
                access_log=False,
            )
        )

    @property
    def started(self) -> bool:
        return bool(self._server.started)

    @property
    def port(self) -> int:
        """The bound port (resolves port 0 once listening)."""
        if self._socket is not None:
            return int(self._socket.getsockname()[1])
        return self._port

    @property
    def failure(self) -> Exception | None:
        return self._failure

    def fail(self, error: Exception) -> None:
        """Record a fatal forwarding failure and shut the listener down."""
        logger.error("Forwarding an output event failed: %s", error)
        if self._failure is None:
            self._failure = error
        self._server.should_exit = True

    def stop(self) -> None:
        """Request a graceful shutdown."""
        self._server.should_exit = True

    def _bind(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self._host, self._port))
        except OSError as e:
            sock.close()
            raise CommunicationError(
                f"Binding the event collector to {self._host}:{self._port}: {e}"
            ) from e
        sock.set_inheritable(True)
        return sock

    async def serve(self) -> None:
        """
        Run until stop() or a fatal failure.

        Raises:
            CommunicationError: the port could not be bound or an event could
                not be forwarded.
        """
        try:
            self._socket = self._bind()
            logger.info("Event collector listening on %s:%d", self._host, self.port)
            await self._server.serve(sockets=[self._socket])
        finally:
            self._sender.close()
            if self._socket is not None:
                self._socket.close()
        if self._failure is not None:
            raise CommunicationError(
                f"Forwarding an output event to the test driver: {self._failure}"
            ) from self._failure
        logger.info("Event collector stopped")

    async def wait_started(self, task: asyncio.Task[None]) -> None:
        """
        Wait until the listener accepts connections.

        If the serving task ends first its exception is raised here.
        """
        while not self.started:
            if task.done():
                task.result()
                raise CommunicationError("The event collector stopped before it started listening")
            await asyncio.sleep(STARTUP_POLL_SECONDS)
