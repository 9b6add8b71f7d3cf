"""
Intent classification: does a message ask for a picture or for an answer?
"""
from typing import Protocol

from .llm_backend import TextGenerator
from .prompts import CLASSIFY_PROMPT, IMAGE_SENTINEL
from .types import ClassificationResult, DirectAnswer, ImageRequest
from .utils.logging import get_logger

logger = get_logger(__name__)


class IntentClassifier(Protocol):
    async def classify(self, text: str) -> ClassificationResult:
        ...


class SentinelIntentClassifier:
    """Asks the model to answer directly or reply with a single sentinel token.

    Matching is a substring test on free text, so an answer that happens to
    quote the sentinel is read as an image request. Swap this class for a
    structured-output classifier to remove that ambiguity.
    """

    def __init__(self, llm: TextGenerator, sentinel: str = IMAGE_SENTINEL):
        self.llm = llm
        self.sentinel = sentinel

    def build_prompt(self, text: str) -> str:
        return CLASSIFY_PROMPT.format(sentinel=self.sentinel, text=text)

    def parse(self, response: str) -> ClassificationResult:
        reply = response.strip()
        if self.sentinel in reply:
            return ImageRequest()
        return DirectAnswer(reply)

    async def classify(self, text: str) -> ClassificationResult:
        response = await self.llm.generate(self.build_prompt(text))
        result = self.parse(response)
        logger.info(
            f"🧭 Intent: {'image' if isinstance(result, ImageRequest) else 'answer'}",
            extra={"subsys": "classifier", "event": "classified"},
        )
        return result
