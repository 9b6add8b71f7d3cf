import httpx
import openai
import pytest

from relay.exceptions import APIError, InferenceError
from relay.llm_backend import OpenAITextGenerator


class FakeChatCompletions:
    def __init__(self, create_fn):
        self._create = create_fn

    async def create(self, **kwargs):
        return await self._create(**kwargs)


class FakeChat:
    def __init__(self, create_fn):
        self.completions = FakeChatCompletions(create_fn)


class FakeOpenAIClient:
    def __init__(self, create_fn):
        self.chat = FakeChat(create_fn)


def completion(content):
    class _Msg:
        pass

    class _Choice:
        message = _Msg()

    class _Resp:
        choices = [_Choice()]

    _Msg.content = content
    return _Resp()


def make_generator(create_fn):
    return OpenAITextGenerator(api_key="k", model="gemini-2.5-flash", client=FakeOpenAIClient(create_fn))


@pytest.mark.asyncio
async def test_generate_sends_single_user_message():
    calls = []

    async def fake_create(**kwargs):
        calls.append(kwargs)
        return completion("GAMBAR_MODE")

    text = await make_generator(fake_create).generate("halo")

    assert text == "GAMBAR_MODE"
    assert calls == [{"model": "gemini-2.5-flash", "messages": [{"role": "user", "content": "halo"}]}]


@pytest.mark.asyncio
async def test_sdk_errors_become_api_error():
    async def fake_create(**kwargs):
        raise openai.APIConnectionError(request=httpx.Request("POST", "https://llm.test/v1/chat/completions"))

    with pytest.raises(APIError):
        await make_generator(fake_create).generate("halo")


@pytest.mark.asyncio
async def test_empty_content_is_inference_error():
    async def fake_create(**kwargs):
        return completion(None)

    with pytest.raises(InferenceError):
        await make_generator(fake_create).generate("halo")
