"""
Share coordinator: binds the session state machine to the network.

Owns the single live TransferServer and the current SessionState. Session
events are applied one at a time under a lock, so receiver workers hand
payloads over through ``_on_transfer`` instead of touching state directly.
"""

import asyncio
import logging
from typing import Callable

from pydantic import ValidationError

from config import RECEIVER_PORT, SENDER_INFO
from pairing.descriptor import ConnectionDescriptor
from pairing.network import discover_local_ipv4
from session.machine import (
    ADDRESS_UNAVAILABLE,
    EventKind,
    SessionEvent,
    SessionStateMachine,
)
from session.state import SessionStage, SessionState
from transfer.client import TransferClient
from transfer.errors import NetworkError, Result
from transfer.models import Role, TransferRequest, TransferResponse
from transfer.server import TransferServer

logger = logging.getLogger(__name__)


class ShareCoordinator:
    """Runs one sender-or-receiver session at a time."""

    def __init__(
        self,
        client: TransferClient | None = None,
        discover_host: Callable[[], str | None] = discover_local_ipv4,
        port: int = RECEIVER_PORT,
        sender_info: str | None = SENDER_INFO,
    ) -> None:
        self._client = client or TransferClient()
        self._discover_host = discover_host
        self._port = port
        self._sender_info = sender_info
        self._machine = SessionStateMachine()
        self._server: TransferServer | None = None
        self._generation = 0
        self._state_lock = asyncio.Lock()
        self._server_lock = asyncio.Lock()
        self._send_lock = asyncio.Lock()
        self._state_callbacks: list = []  # async fn(state)

    async def __aenter__(self) -> "ShareCoordinator":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def state(self) -> SessionState:
        return self._machine.state

    @property
    def server(self) -> TransferServer | None:
        return self._server

    def on_state_change(self, callback) -> None:
        """Register callback: async fn(state: SessionState).

        Callbacks run while the session lock is held and must not call back
        into the coordinator.
        """
        self._state_callbacks.append(callback)

    async def _emit(self, state: SessionState) -> None:
        for cb in self._state_callbacks:
            try:
                await cb(state)
            except Exception as e:
                logger.error(f"State callback error: {e}")

    def _is_stale(self, generation: int | None) -> bool:
        return generation is not None and generation != self._generation

    async def _apply(self, event: SessionEvent, generation: int | None = None) -> bool:
        async with self._state_lock:
            if self._is_stale(generation):
                logger.debug(f"Discarding {event.kind.value} from a previous session")
                return False
            if event.kind is EventKind.RESET:
                self._generation += 1
            current = self._machine.apply(event)
            if current is None:
                return False
            await self._emit(current)
            return True

    # --- Session operations ---

    async def choose_role(self, role: Role) -> SessionState:
        if not await self._apply(SessionEvent.choose_role(role)):
            logger.warning(f"Cannot choose {role.value} while {self.state.stage.value}")
            return self.state
        generation = self._generation
        await self._apply(SessionEvent.role_loaded(), generation)
        if role is Role.RECEIVER:
            await self._begin_receiving(generation)
        return self.state

    async def descriptor_obtained(self, text: str) -> SessionState:
        await self._apply(SessionEvent.descriptor_obtained(text))
        return self.state

    async def submit(self, payload: str) -> SessionState:
        state = self.state
        if state.stage is not SessionStage.SENDER_READY:
            logger.warning(f"Cannot send while {state.stage.value}")
            return state
        if not payload or not payload.strip():
            logger.warning("Cannot send empty data")
            return state
        if self._send_lock.locked():
            logger.warning("A send is already in flight")
            return state

        generation = self._generation
        result = await self.send_data(state.descriptor, payload)
        if result.ok:
            await self._apply(SessionEvent.send_succeeded(payload), generation)
        else:
            reason = f"Failed to send data: {result.error.reason}"
            await self._apply(SessionEvent.failed(reason), generation)
        return self.state

    async def reset(self) -> SessionState:
        """Return to selection from any state, releasing any live receiver."""
        await self._apply(SessionEvent.reset())
        await self.stop_server()
        return self.state

    async def close(self) -> None:
        await self.stop_server()
        logger.info("Share coordinator closed")

    async def _begin_receiving(self, generation: int) -> None:
        descriptor = await self._local_descriptor()
        if descriptor is None:
            await self._apply(SessionEvent.failed(ADDRESS_UNAVAILABLE), generation)
            return

        result = await self._start_receiver(descriptor, generation)
        if result.ok:
            await self._apply(SessionEvent.receiver_started(descriptor), generation)
        else:
            reason = f"Could not start receiver: {result.error.reason}"
            await self._apply(SessionEvent.failed(reason), generation)

    async def _local_descriptor(self) -> ConnectionDescriptor | None:
        try:
            host = await asyncio.to_thread(self._discover_host)
        except Exception as e:
            logger.error(f"Address discovery failed: {e}")
            return None
        if not host:
            return None
        try:
            return ConnectionDescriptor(host=host, port=self._port)
        except ValidationError as e:
            logger.error(f"Unusable local address {host}:{self._port}: {e.errors()[0]['msg']}")
            return None

    # --- Network operations ---

    async def start_receiver(self, descriptor: ConnectionDescriptor) -> Result[None]:
        """Start the one receiver, stopping any previous one first."""
        return await self._start_receiver(descriptor, None)

    async def _start_receiver(
        self, descriptor: ConnectionDescriptor, generation: int | None
    ) -> Result[None]:
        async with self._server_lock:
            if self._server is not None:
                logger.info("Stopping previous receiver before starting a new one")
                await self._stop_locked()
            if self._is_stale(generation):
                return Result.failure(NetworkError.UNKNOWN)

            async def on_transfer(transfer: TransferRequest) -> None:
                await self._on_transfer(server, transfer)

            server = TransferServer(observer=on_transfer)
            self._server = server
            result = await server.start(descriptor)
            if not result.ok:
                self._server = None
                return Result.failure(result.error)

            if self._is_stale(generation):
                logger.info("Session was reset while the receiver started")
                await self._stop_locked()
                return Result.failure(NetworkError.UNKNOWN)
            return Result.success()

    async def _on_transfer(self, server: TransferServer, transfer: TransferRequest) -> None:
        if server is not self._server:
            logger.debug("Ignoring transfer from a replaced receiver")
            return
        await self._apply(SessionEvent.server_notified_received(transfer.payload))

    async def send_data(
        self, descriptor: ConnectionDescriptor, payload: str
    ) -> Result[TransferResponse]:
        request = TransferRequest(payload=payload, sender_info=self._sender_info)
        async with self._send_lock:
            return await self._client.send(descriptor, request)

    async def stop_server(self) -> None:
        """Stop the active receiver. A no-op when none is running."""
        async with self._server_lock:
            await self._stop_locked()

    async def _stop_locked(self) -> None:
        # Stays registered until stopped so in-flight transfers still reach the session.
        server = self._server
        if server is None:
            return
        try:
            await server.stop()
        finally:
            self._server = None
