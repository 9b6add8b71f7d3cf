"""
Transport port: what the connection manager needs from a messaging backend.
"""
from __future__ import annotations

from typing import Any, AsyncIterator, Dict, Protocol

from relay.types import Payload, TransportEvent


class TransportSession(Protocol):
    def events(self) -> AsyncIterator[TransportEvent]:
        """Yield connection, credential and inbound events until the session closes.

        The last event is a ConnectionUpdate with connection == "close".
        """
        ...

    async def send(self, recipient_id: str, payload: Payload) -> None:
        ...

    async def close(self) -> None:
        ...


class Transport(Protocol):
    async def fetch_latest_version(self) -> str:
        ...

    async def connect(self, version: str, credentials: Dict[str, Any]) -> TransportSession:
        ...
