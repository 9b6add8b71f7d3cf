"""
Image query refinement.

The model turns a chat message into 1-3 English search keywords; a local
filler-word strip of the raw text backs it up, and "random" backs up both.
"""
import re

from .llm_backend import TextGenerator
from .prompts import FILLER_WORDS, RANDOM_QUERY, REFINE_PROMPT
from .utils.logging import get_logger

logger = get_logger(__name__)

_FILLER_RE = re.compile("(" + "|".join(re.escape(w) for w in FILLER_WORDS) + ")")
_MARKUP_RE = re.compile(r"[*_`]")


def strip_filler_words(text: str) -> str:
    """Lower-case `text` and drop filler words by substring removal."""
    return _FILLER_RE.sub("", text.lower()).strip()


def sanitize_keywords(response: str) -> str:
    """Remove markdown emphasis/code markers from a model reply."""
    return _MARKUP_RE.sub("", response).strip()


def resolve_query(refined: str, fallback: str) -> str:
    return refined or fallback or RANDOM_QUERY


class QueryRefiner:
    def __init__(self, llm: TextGenerator):
        self.llm = llm

    async def refine(self, text: str) -> str:
        """Return a non-empty image search query for `text`.

        Language-model errors propagate to the caller.
        """
        fallback = strip_filler_words(text)
        response = await self.llm.generate(REFINE_PROMPT.format(text=text))
        query = resolve_query(sanitize_keywords(response), fallback)
        logger.info(f"🔍 Image query: {query}", extra={"subsys": "refiner", "event": "query_resolved"})
        return query
