"""
Response composition: turn a pipeline outcome into one outbound message and send it.
"""
from typing import Optional, Protocol

from .prompts import APOLOGY_TEXT, IMAGE_CAPTION, NO_IMAGE_TEXT
from .types import (
    DirectAnswer,
    ImagePayload,
    ImageReply,
    OutboundMessage,
    Payload,
    TextPayload,
    TextReply,
)
from .utils.logging import get_logger

logger = get_logger(__name__)


class MessageSender(Protocol):
    async def send(self, recipient_id: str, payload: Payload) -> None:
        ...


class ResponseComposer:
    def compose_answer(self, answer: DirectAnswer) -> OutboundMessage:
        return TextReply(answer.text)

    def compose_image(self, query: str, candidate: Optional[str]) -> OutboundMessage:
        if candidate:
            return ImageReply(url=candidate, caption=IMAGE_CAPTION.format(query=query))
        return TextReply(NO_IMAGE_TEXT.format(query=query))

    def compose_apology(self) -> OutboundMessage:
        return TextReply(APOLOGY_TEXT)

    @staticmethod
    def to_payload(message: OutboundMessage) -> Payload:
        if isinstance(message, ImageReply):
            return ImagePayload(url=message.url, caption=message.caption)
        return TextPayload(text=message.body)

    async def send(self, sender: MessageSender, recipient_id: str, message: OutboundMessage) -> None:
        await sender.send(recipient_id, self.to_payload(message))
        logger.info(
            f"📤 Sent {type(message).__name__} to {recipient_id}",
            extra={"subsys": "composer", "event": "reply_sent", "sender_id": recipient_id},
        )
