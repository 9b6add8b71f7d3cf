"""
Discord transport adapter.

Each session wraps a fresh `discord.Client` started with `reconnect=False`:
discord.py gives up on the first gateway failure and the relay's connection
manager decides whether to open a new session.
"""
from __future__ import annotations

import asyncio
from typing import Any, AsyncIterator, Dict, Optional

import aiohttp
import discord

from relay.exceptions import TransportError
from relay.types import (
    BatchKind,
    ConnectionUpdate,
    CredentialsUpdate,
    DisconnectReason,
    ImagePayload,
    InboundBatch,
    Payload,
    RawMessage,
    TextPayload,
    TransportEvent,
)
from relay.utils.logging import get_logger
from relay.utils.text import send_in_chunks

logger = get_logger(__name__)

# Gateway close codes, see the Discord developer docs
_CLOSE_CODE_REASONS: Dict[int, DisconnectReason] = {
    1000: DisconnectReason.CONNECTION_CLOSED,
    4004: DisconnectReason.LOGGED_OUT,  # authentication failed
    4007: DisconnectReason.RESTART_REQUIRED,  # invalid seq
    4009: DisconnectReason.TIMED_OUT,  # session timed out
    4013: DisconnectReason.FORBIDDEN,  # invalid intents
    4014: DisconnectReason.FORBIDDEN,  # disallowed intents
}


def reason_from_close_code(code: Optional[int]) -> DisconnectReason:
    if code is None:
        return DisconnectReason.CONNECTION_LOST
    return _CLOSE_CODE_REASONS.get(code, DisconnectReason.CONNECTION_CLOSED)


def reason_from_exception(exc: BaseException) -> DisconnectReason:
    """Map an exception raised by `discord.Client.start` to a disconnect reason."""
    if isinstance(exc, discord.LoginFailure):
        return DisconnectReason.LOGGED_OUT
    if isinstance(exc, discord.PrivilegedIntentsRequired):
        return DisconnectReason.FORBIDDEN
    if isinstance(exc, discord.ConnectionClosed):
        return reason_from_close_code(exc.code)
    if isinstance(exc, discord.GatewayNotFound):
        return DisconnectReason.UNAVAILABLE_SERVICE
    if isinstance(exc, discord.HTTPException):
        if exc.status == 401:
            return DisconnectReason.LOGGED_OUT
        if exc.status >= 500:
            return DisconnectReason.UNAVAILABLE_SERVICE
        return DisconnectReason.BAD_SESSION
    if isinstance(exc, (aiohttp.ClientError, OSError, asyncio.TimeoutError)):
        return DisconnectReason.CONNECTION_LOST
    return DisconnectReason.UNKNOWN


def create_intents() -> discord.Intents:
    intents = discord.Intents.default()
    intents.message_content = True
    return intents


class _RelayClient(discord.Client):
    """discord.Client that forwards gateway events into a DiscordSession."""

    def __init__(self, session: "DiscordSession", **kwargs: Any):
        super().__init__(**kwargs)
        self._session = session

    async def on_ready(self) -> None:
        logger.info(f"Logged in as {self.user}", extra={"subsys": "transport", "event": "ready"})
        self._session._emit(ConnectionUpdate(connection="open"))
        self._session._emit(
            CredentialsUpdate({"token": self._session.token, "user_id": str(self.user.id)})
        )

    async def on_message(self, message: discord.Message) -> None:
        raw = RawMessage(
            sender_id=str(message.channel.id),
            from_self=self.user is not None and message.author.id == self.user.id,
            conversation=message.content or None,
        )
        self._session._emit(InboundBatch(kind=BatchKind.NOTIFY, messages=[raw]))


class DiscordSession:
    def __init__(self, token: Optional[str], intents: Optional[discord.Intents] = None):
        self.token = token
        self.client = _RelayClient(self, intents=intents or create_intents())
        self._events: asyncio.Queue[TransportEvent] = asyncio.Queue()
        self._runner: Optional[asyncio.Task] = None

    def _emit(self, event: TransportEvent) -> None:
        self._events.put_nowait(event)

    def start(self) -> None:
        self._emit(ConnectionUpdate(connection="connecting"))
        self._runner = asyncio.create_task(self._run(), name="discord-session")

    async def _run(self) -> None:
        reason = DisconnectReason.CONNECTION_CLOSED
        try:
            if not self.token:
                logger.error("No bot token stored", extra={"subsys": "transport", "event": "no_token"})
                reason = DisconnectReason.LOGGED_OUT
            else:
                await self.client.start(self.token, reconnect=False)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            reason = reason_from_exception(e)
            logger.warning(
                f"Gateway session ended: {type(e).__name__}: {e}",
                extra={"subsys": "transport", "event": "session_error"},
            )
        finally:
            self._emit(ConnectionUpdate(connection="close", disconnect_reason=reason))

    async def events(self) -> AsyncIterator[TransportEvent]:
        while True:
            event = await self._events.get()
            yield event
            if isinstance(event, ConnectionUpdate) and event.connection == "close":
                return

    async def send(self, recipient_id: str, payload: Payload) -> None:
        if not self.client.is_ready() or self.client.is_closed():
            raise TransportError("Session is not connected")
        try:
            channel_id = int(recipient_id)
            channel = self.client.get_channel(channel_id) or await self.client.fetch_channel(channel_id)
            if isinstance(payload, ImagePayload):
                embed = discord.Embed(description=payload.caption)
                embed.set_image(url=payload.url)
                await channel.send(embed=embed)
            elif isinstance(payload, TextPayload):
                await send_in_chunks(channel, payload.text)
            else:
                raise TransportError(f"Unsupported payload type: {type(payload).__name__}")
        except (ValueError, discord.DiscordException) as e:
            raise TransportError(f"Failed to send to {recipient_id}: {e}") from e

    async def close(self) -> None:
        if not self.client.is_closed():
            await self.client.close()
        if self._runner is not None and not self._runner.done():
            self._runner.cancel()
            await asyncio.gather(self._runner, return_exceptions=True)


class DiscordTransport:
    def __init__(self, intents: Optional[discord.Intents] = None):
        self.intents = intents

    async def fetch_latest_version(self) -> str:
        return discord.__version__

    async def connect(self, version: str, credentials: Dict[str, Any]) -> DiscordSession:
        logger.debug(f"Opening discord.py {version} session", extra={"subsys": "transport", "event": "connect"})
        session = DiscordSession(credentials.get("token"), intents=self.intents)
        session.start()
        return session
