"""
On-demand HTTP receiver.

Binds a FastAPI app to one connection descriptor with an embedded uvicorn
server, accepts ``POST /receive`` and keeps only the most recently received
request in a single slot that is handed to one observer.
"""

import asyncio
import contextlib
import logging
import socket
from typing import Awaitable, Callable

import uvicorn
from fastapi import FastAPI

from api.routes import create_router
from config import APP_NAME
from pairing.descriptor import ConnectionDescriptor
from transfer.errors import NetworkError, Result, ServerBindError
from transfer.models import TransferRequest

logger = logging.getLogger(__name__)

Observer = Callable[[TransferRequest], Awaitable[None]]

STARTUP_POLL_INTERVAL = 0.01  # seconds
SHUTDOWN_GRACE = 5  # seconds in-flight requests get to finish on stop


class _EmbeddedServer(uvicorn.Server):
    """uvicorn server that leaves the host process's signal handlers alone."""

    @contextlib.contextmanager
    def capture_signals(self):
        yield


def bind_socket(descriptor: ConnectionDescriptor) -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((descriptor.host, descriptor.port))
    except OSError as e:
        sock.close()
        raise ServerBindError(f"cannot bind {descriptor}: {e}") from e
    return sock


class ServerHandle:
    """A live listener. ``stop()`` may be called any number of times."""

    def __init__(
        self,
        descriptor: ConnectionDescriptor,
        server: uvicorn.Server,
        task: asyncio.Task,
        sock: socket.socket,
    ) -> None:
        self.descriptor = descriptor
        self._server = server
        self._task = task
        self._sock = sock
        self._stopped = False

    @property
    def running(self) -> bool:
        return not self._stopped and not self._task.done()

    async def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        # Close the listener first so no connection is accepted after this
        # point; requests already in flight still finish.
        for listener in self._server.servers:
            listener.close()
        self._server.should_exit = True
        try:
            if not self._task.done():
                await asyncio.wait({self._task})
            if not self._task.cancelled() and self._task.exception() is not None:
                logger.error(
                    f"Receiver on {self.descriptor} stopped with error: {self._task.exception()}"
                )
        finally:
            self._sock.close()
        logger.info(f"Receiver on {self.descriptor} stopped")


class TransferServer:
    """Receives transfers for one descriptor at a time."""

    def __init__(self, observer: Observer | None = None) -> None:
        self._observer = observer
        self._last_received: TransferRequest | None = None
        self._lock = asyncio.Lock()
        self._handle: ServerHandle | None = None
        self.app = FastAPI(
            title=f"{APP_NAME} receiver",
            docs_url=None,
            redoc_url=None,
            openapi_url=None,
        )
        self.app.include_router(create_router(self))

    @property
    def last_received(self) -> TransferRequest | None:
        return self._last_received

    @property
    def running(self) -> bool:
        return self._handle is not None and self._handle.running

    async def accept(self, transfer: TransferRequest) -> None:
        """Replace the slot and notify the observer before the reply is sent."""
        async with self._lock:
            self._last_received = transfer
            if self._observer is None:
                return
            try:
                await self._observer(transfer)
            except Exception as e:
                logger.error(f"Transfer observer error: {e}", exc_info=True)

    async def start(self, descriptor: ConnectionDescriptor) -> Result[ServerHandle]:
        """Bind and serve on ``descriptor``. Any bind failure is SERVER_FAULT."""
        if self.running:
            logger.warning(
                f"Receiver already running on {self._handle.descriptor}; "
                f"refusing to start on {descriptor}"
            )
            return Result.failure(NetworkError.SERVER_FAULT)

        if self._handle is not None:
            # Left behind by a listener that died on its own.
            await self.stop()

        self._last_received = None

        try:
            sock = await asyncio.to_thread(bind_socket, descriptor)
        except ServerBindError as e:
            logger.error(f"Receiver start failed: {e}")
            return Result.failure(NetworkError.SERVER_FAULT)

        config = uvicorn.Config(
            self.app,
            lifespan="off",
            log_config=None,
            access_log=False,
            timeout_graceful_shutdown=SHUTDOWN_GRACE,
        )
        server = _EmbeddedServer(config)
        task = asyncio.create_task(server.serve(sockets=[sock]))

        while not server.started and not task.done():
            await asyncio.sleep(STARTUP_POLL_INTERVAL)

        if not server.started:
            sock.close()
            error = None if task.cancelled() else task.exception()
            logger.error(f"Receiver on {descriptor} failed to start: {error}")
            return Result.failure(NetworkError.SERVER_FAULT)

        self._handle = ServerHandle(descriptor, server, task, sock)
        logger.info(f"Receiver listening on {descriptor}")
        return Result.success(self._handle)

    async def stop(self) -> None:
        """Release the listener. A no-op if it was never started or is stopped."""
        handle, self._handle = self._handle, None
        if handle is not None:
            await handle.stop()
