"""
Message dispatcher: filters inbound batches and drives the reply pipeline
one message at a time, in arrival order.
"""
from typing import Optional

from .classifier import IntentClassifier
from .composer import MessageSender, ResponseComposer
from .exceptions import TransportError
from .refiner import QueryRefiner
from .search import ImageSearchClient
from .types import BatchKind, ImageRequest, InboundBatch, InboundMessage, RawMessage
from .utils.logging import get_logger

logger = get_logger(__name__)


def extract_message(raw: RawMessage) -> Optional[InboundMessage]:
    """Return the plain text message, or None when it must not be answered."""
    if raw.from_self:
        return None
    text = raw.conversation or raw.extended_text or ""
    if not text:
        return None
    return InboundMessage(sender_id=raw.sender_id, text=text, is_self_originated=False)


class MessageDispatcher:
    def __init__(
        self,
        classifier: IntentClassifier,
        refiner: QueryRefiner,
        image_search: ImageSearchClient,
        composer: ResponseComposer,
    ):
        self.classifier = classifier
        self.refiner = refiner
        self.image_search = image_search
        self.composer = composer

    async def handle_batch(self, batch: InboundBatch, sender: MessageSender) -> None:
        if batch.kind != BatchKind.NOTIFY:
            return
        for raw in batch.messages:
            message = extract_message(raw)
            if message is None:
                continue
            await self.handle_message(message, sender)

    async def handle_message(self, message: InboundMessage, sender: MessageSender) -> None:
        logger.info(
            f"📩 Message from {message.sender_id}: {message.text}",
            extra={"subsys": "dispatcher", "event": "message_in", "sender_id": message.sender_id},
        )
        try:
            result = await self.classifier.classify(message.text)
            if isinstance(result, ImageRequest):
                query = await self.refiner.refine(message.text)
                candidate = await self.image_search.find_image(query)
                reply = self.composer.compose_image(query, candidate)
            else:
                reply = self.composer.compose_answer(result)
            await self.composer.send(sender, message.sender_id, reply)
        except Exception as e:
            logger.error(
                f"❌ Failed to handle message from {message.sender_id}: {e}",
                exc_info=True,
                extra={"subsys": "dispatcher", "event": "message_fail", "sender_id": message.sender_id},
            )
            await self._send_apology(message.sender_id, sender)

    async def _send_apology(self, recipient_id: str, sender: MessageSender) -> None:
        try:
            await self.composer.send(sender, recipient_id, self.composer.compose_apology())
        except TransportError as e:
            logger.error(
                f"❌ Could not deliver apology to {recipient_id}: {e}",
                extra={"subsys": "dispatcher", "event": "apology_fail", "sender_id": recipient_id},
            )
