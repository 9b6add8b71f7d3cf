"""
Connection manager: owns the transport session lifecycle.

    DISCONNECTED → CONNECTING → (AWAITING_PAIRING | CONNECTED) → DISCONNECTED
                                                                 | LOGGED_OUT

Every disconnect other than LOGGED_OUT opens a brand-new session with fresh
event wiring. LOGGED_OUT is terminal: the stored credentials must be
re-provisioned before the relay can run again.
"""
import asyncio
from typing import Any, Callable, Dict, Optional

from .auth_state import CredentialStore
from .dispatcher import MessageDispatcher
from .pairing import render_pairing_challenge
from .transport import Transport, TransportSession
from .types import (
    ConnectionState,
    ConnectionUpdate,
    CredentialsUpdate,
    DisconnectReason,
    InboundBatch,
)
from .utils.logging import get_logger

logger = get_logger(__name__)


class ConnectionManager:
    def __init__(
        self,
        transport: Transport,
        credential_store: CredentialStore,
        dispatcher: MessageDispatcher,
        on_pairing: Callable[[str], None] = render_pairing_challenge,
        reconnect_delay: float = 0.0,
        max_reconnect_delay: float = 30.0,
    ):
        self.transport = transport
        self.credential_store = credential_store
        self.dispatcher = dispatcher
        self.on_pairing = on_pairing
        self.reconnect_delay = reconnect_delay
        self.max_reconnect_delay = max_reconnect_delay

        self.state = ConnectionState.DISCONNECTED
        self.session: Optional[TransportSession] = None
        self.connect_attempts = 0
        self._was_connected = False
        self._stop_requested = False
        self._stop_event = asyncio.Event()

    @classmethod
    def from_config(
        cls,
        config: Dict[str, Any],
        transport: Transport,
        credential_store: CredentialStore,
        dispatcher: MessageDispatcher,
    ) -> "ConnectionManager":
        return cls(
            transport=transport,
            credential_store=credential_store,
            dispatcher=dispatcher,
            reconnect_delay=config.get("RECONNECT_DELAY_SECONDS", 0.0),
            max_reconnect_delay=config.get("RECONNECT_MAX_DELAY_SECONDS", 30.0),
        )

    def _set_state(self, state: ConnectionState) -> None:
        if state != self.state:
            logger.debug(
                f"Connection state {self.state.value} → {state.value}",
                extra={"subsys": "connection", "event": "state_change"},
            )
        self.state = state

    def _backoff(self, failures: int) -> float:
        if self.reconnect_delay <= 0 or failures <= 0:
            return 0.0
        return min(self.reconnect_delay * (2 ** (failures - 1)), self.max_reconnect_delay)

    async def run(self) -> ConnectionState:
        """Connect and keep reconnecting until logout or stop(); return the final state."""
        failures = 0
        while not self._stop_requested:
            reason = await self._connect_once()

            if self._stop_requested:
                break

            if reason == DisconnectReason.LOGGED_OUT:
                self._set_state(ConnectionState.LOGGED_OUT)
                logger.error(
                    "❌ Session logged out. Remove the auth directory, provision new credentials and restart.",
                    extra={"subsys": "connection", "event": "logged_out"},
                )
                return self.state

            # A session that reached CONNECTED resets the backoff
            failures = 0 if self._was_connected else failures + 1
            delay = self._backoff(failures)
            logger.warning(
                f"❌ Connection closed ({reason.name}), reconnecting"
                + (f" in {delay:.1f}s" if delay else "")
                + "...",
                extra={"subsys": "connection", "event": "reconnect"},
            )
            if delay:
                await self._wait_before_reconnect(delay)

        self._set_state(ConnectionState.DISCONNECTED)
        return self.state

    async def _wait_before_reconnect(self, delay: float) -> None:
        """Sleep for the backoff delay, returning early once stop() is called."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    async def stop(self) -> None:
        self._stop_requested = True
        self._stop_event.set()
        if self.session is not None:
            await self.session.close()

    async def _connect_once(self) -> DisconnectReason:
        self._was_connected = False
        self._set_state(ConnectionState.CONNECTING)
        self.connect_attempts += 1

        try:
            version = await self.transport.fetch_latest_version()
            credentials = self.credential_store.load()
            session = await self.transport.connect(version, credentials)
        except Exception as e:
            logger.error(
                f"❌ Could not open transport session: {type(e).__name__}: {e}",
                extra={"subsys": "connection", "event": "connect_fail"},
            )
            self._set_state(ConnectionState.DISCONNECTED)
            return DisconnectReason.CONNECTION_LOST

        self.session = session
        if self._stop_requested:
            await session.close()
            self.session = None
            return DisconnectReason.CONNECTION_CLOSED

        inbox: asyncio.Queue = asyncio.Queue()
        worker = asyncio.create_task(self._drain_inbox(inbox, session), name="relay-dispatch")
        try:
            return await self._consume_events(session, inbox)
        finally:
            worker.cancel()
            await asyncio.gather(worker, return_exceptions=True)
            await session.close()
            self.session = None
            self._set_state(ConnectionState.DISCONNECTED)

    async def _consume_events(self, session: TransportSession, inbox: asyncio.Queue) -> DisconnectReason:
        async for event in session.events():
            if isinstance(event, ConnectionUpdate):
                if event.pairing_challenge:
                    self._set_state(ConnectionState.AWAITING_PAIRING)
                    logger.info("📱 Pairing required", extra={"subsys": "connection", "event": "pairing"})
                    self.on_pairing(event.pairing_challenge)
                if event.connection == "open":
                    self._set_state(ConnectionState.CONNECTED)
                    self._was_connected = True
                    logger.info("✅ Relay connected", extra={"subsys": "connection", "event": "open"})
                elif event.connection == "close":
                    return event.disconnect_reason or DisconnectReason.UNKNOWN
            elif isinstance(event, CredentialsUpdate):
                self.credential_store.save(event.credentials)
            elif isinstance(event, InboundBatch):
                if self.state == ConnectionState.CONNECTED:
                    inbox.put_nowait(event)
                else:
                    logger.debug(
                        f"Dropping inbound batch received while {self.state.value}",
                        extra={"subsys": "connection", "event": "batch_dropped"},
                    )
        return DisconnectReason.CONNECTION_CLOSED

    async def _drain_inbox(self, inbox: asyncio.Queue, session: TransportSession) -> None:
        while True:
            batch = await inbox.get()
            await self.dispatcher.handle_batch(batch, session)
