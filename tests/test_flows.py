"""
End-to-end reply flows through the real classifier, refiner, search client
and composer. Only the language model and the Unsplash HTTP layer are faked.
"""
import httpx
import pytest

from relay.classifier import SentinelIntentClassifier
from relay.composer import ResponseComposer
from relay.dispatcher import MessageDispatcher
from relay.refiner import QueryRefiner
from relay.search import ImageSearchClient
from relay.types import BatchKind, ImagePayload, InboundBatch, RawMessage, TextPayload

from .fakes import FakeLLM, make_unsplash, unsplash_payload


def build_dispatcher(llm, handler):
    return MessageDispatcher(
        classifier=SentinelIntentClassifier(llm),
        refiner=QueryRefiner(llm),
        image_search=ImageSearchClient(make_unsplash(handler)),
        composer=ResponseComposer(),
    )


def incoming(text, sender_id="1122334455667788"):
    return InboundBatch(kind=BatchKind.NOTIFY, messages=[RawMessage(sender_id=sender_id, conversation=text)])


@pytest.mark.asyncio
async def test_flow_image_request(sender):
    """Image request: sentinel → refined keywords → photo with caption."""
    queries = []

    def handler(request):
        queries.append(request.url.params["query"])
        return httpx.Response(200, json=unsplash_payload("https://images.unsplash.com/cat-small"))

    llm = FakeLLM("GAMBAR_MODE", "cute cat")
    await build_dispatcher(llm, handler).handle_batch(incoming("tolong gambar kucing lucu"), sender)

    assert queries == ["cute cat"]
    assert len(sender.sent) == 1
    _, payload = sender.sent[0]
    assert isinstance(payload, ImagePayload)
    assert payload.url == "https://images.unsplash.com/cat-small"
    assert "cute cat" in payload.caption


@pytest.mark.asyncio
async def test_flow_question(sender):
    """Question: the model's answer is relayed as-is and no search happens."""
    answer = "Fotosintesis adalah proses tumbuhan mengubah cahaya menjadi energi kimia."

    def handler(request):
        raise AssertionError("image search must not be called for questions")

    llm = FakeLLM(answer)
    await build_dispatcher(llm, handler).handle_batch(incoming("apa itu fotosintesis?"), sender)

    assert sender.sent == [("1122334455667788", TextPayload(answer))]
    assert len(llm.prompts) == 1


@pytest.mark.asyncio
async def test_flow_search_timeout(sender):
    """Search timeout: user is told no image was found for the attempted query."""

    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    llm = FakeLLM("GAMBAR_MODE", "sunset beach")
    await build_dispatcher(llm, handler).handle_batch(incoming("kirim foto pantai sore"), sender)

    assert len(sender.sent) == 1
    _, payload = sender.sent[0]
    assert isinstance(payload, TextPayload)
    assert "sunset beach" in payload.text
    assert "tidak ditemukan" in payload.text


@pytest.mark.asyncio
async def test_flow_no_results(sender):
    llm = FakeLLM("GAMBAR_MODE", "zzqx")
    handler = lambda request: httpx.Response(200, json={"total": 0, "results": []})
    await build_dispatcher(llm, handler).handle_batch(incoming("gambar zzqx"), sender)

    _, payload = sender.sent[0]
    assert isinstance(payload, TextPayload)
    assert "zzqx" in payload.text
