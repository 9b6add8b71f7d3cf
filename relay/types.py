from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class InboundMessage:
    """A plain-text message ready for the reply pipeline."""

    sender_id: str
    text: str
    is_self_originated: bool = False


@dataclass(frozen=True)
class ImageRequest:
    """Classification outcome: the sender wants a picture."""


@dataclass(frozen=True)
class DirectAnswer:
    """Classification outcome: the model answered the question directly."""

    text: str


ClassificationResult = Union[ImageRequest, DirectAnswer]


@dataclass(frozen=True)
class TextReply:
    body: str


@dataclass(frozen=True)
class ImageReply:
    url: str
    caption: str


OutboundMessage = Union[TextReply, ImageReply]


class ConnectionState(Enum):
    """Lifecycle states of the transport connection."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    AWAITING_PAIRING = "awaiting_pairing"
    CONNECTED = "connected"
    LOGGED_OUT = "logged_out"


class DisconnectReason(IntEnum):
    """Why a transport session closed. Only LOGGED_OUT is terminal."""

    UNKNOWN = 0
    LOGGED_OUT = 401
    FORBIDDEN = 403
    CONNECTION_LOST = 408
    CONNECTION_CLOSED = 428
    CONNECTION_REPLACED = 440
    BAD_SESSION = 500
    UNAVAILABLE_SERVICE = 503
    RESTART_REQUIRED = 515

    # Same code as CONNECTION_LOST on the wire
    TIMED_OUT = 408


class BatchKind(str, Enum):
    """Class of an inbound batch: live notification or history backfill."""

    NOTIFY = "notify"
    APPEND = "append"


# --- Transport events -------------------------------------------------------

@dataclass(frozen=True)
class ConnectionUpdate:
    connection: Optional[str] = None  # "connecting" | "open" | "close"
    pairing_challenge: Optional[str] = None
    disconnect_reason: Optional[DisconnectReason] = None


@dataclass(frozen=True)
class RawMessage:
    """A transport message before text extraction."""

    sender_id: str
    from_self: bool = False
    conversation: Optional[str] = None
    extended_text: Optional[str] = None


@dataclass(frozen=True)
class InboundBatch:
    kind: BatchKind
    messages: List[RawMessage] = field(default_factory=list)


@dataclass(frozen=True)
class CredentialsUpdate:
    credentials: Dict[str, Any] = field(default_factory=dict)


TransportEvent = Union[ConnectionUpdate, InboundBatch, CredentialsUpdate]


# --- Outbound payloads ------------------------------------------------------

@dataclass(frozen=True)
class TextPayload:
    text: str


@dataclass(frozen=True)
class ImagePayload:
    url: str
    caption: str


Payload = Union[TextPayload, ImagePayload]
