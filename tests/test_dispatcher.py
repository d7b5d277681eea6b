import base64

import pytest

from dispatcher import (
    LINK_REFUSAL_MESSAGE,
    LINK_REFUSAL_MESSAGES,
    SUMMARY_TEMPLATE,
    Dispatcher,
    GenerateErrorResponse,
    GenerateRequest,
    GenerateResponse,
    ImageAttachment,
    InlineDataPart,
    InvalidRequest,
    Mode,
    ProviderFailure,
    TextPart,
    contains_url,
    link_refusal_message,
)
from tests.fakes import FakeProvider

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"


@pytest.mark.parametrize(
    "request_kwargs",
    [
        {"prompt": "Hello"},
        {"mode": Mode.CHAT},
        {"mode": Mode.CHAT, "prompt": ""},
        {"mode": Mode.SUMMARIZE, "prompt": "   "},
        {},
    ],
)
def test_missing_mode_or_prompt_is_rejected(dispatcher, provider, request_kwargs):
    result = dispatcher.handle(GenerateRequest(**request_kwargs))

    assert isinstance(result, GenerateErrorResponse)
    assert result.status_code == 400
    assert result.error == "Prompt and mode are required"
    assert provider.calls == []


def test_vision_without_image_is_rejected(dispatcher, provider):
    result = dispatcher.handle(GenerateRequest(mode=Mode.VISION, prompt="What is this?"))

    assert isinstance(result, GenerateErrorResponse)
    assert result.status_code == 400
    assert result.error == "Image file is required for vision mode"
    assert provider.calls == []


def test_vision_with_empty_image_is_rejected(dispatcher, provider):
    image = ImageAttachment(data=b"", mime_type="image/png")
    result = dispatcher.handle(GenerateRequest(mode=Mode.VISION, prompt="What is this?", image=image))

    assert isinstance(result, GenerateErrorResponse)
    assert result.status_code == 400
    assert provider.calls == []


def test_validate_raises_invalid_request():
    with pytest.raises(InvalidRequest):
        Dispatcher.validate(GenerateRequest(mode=Mode.VISION, prompt="describe"))


def test_chat_sends_raw_prompt_as_single_part(dispatcher, provider):
    result = dispatcher.handle(GenerateRequest(mode=Mode.CHAT, prompt="Hello"))

    assert result == GenerateResponse(text="Hi there!")
    assert provider.calls == [[TextPart(text="Hello")]]


def test_chat_never_forwards_image(dispatcher, provider):
    image = ImageAttachment(data=PNG_BYTES, mime_type="image/png")
    dispatcher.handle(GenerateRequest(mode=Mode.CHAT, prompt="Hello", image=image))

    assert provider.calls == [[TextPart(text="Hello")]]


def test_vision_sends_prompt_and_inline_image(dispatcher, provider):
    image = ImageAttachment(data=PNG_BYTES, mime_type="image/png")
    result = dispatcher.handle(GenerateRequest(mode=Mode.VISION, prompt="What is this?", image=image))

    assert isinstance(result, GenerateResponse)
    assert provider.calls == [
        [
            TextPart(text="What is this?"),
            InlineDataPart(data=base64.b64encode(PNG_BYTES).decode("ascii"), mime_type="image/png"),
        ]
    ]


@pytest.mark.parametrize(
    "prompt",
    [
        "please summarize https://example.com",
        "www.example.com",
        "read this: http://example.com/article?id=1 thanks",
        "HTTPS://EXAMPLE.COM",
    ],
)
def test_summarize_with_link_returns_refusal_without_provider_call(dispatcher, provider, prompt):
    result = dispatcher.handle(GenerateRequest(mode=Mode.SUMMARIZE, prompt=prompt))

    assert result == GenerateResponse(text=LINK_REFUSAL_MESSAGE)
    assert provider.calls == []


def test_summarize_prepends_instruction_template(dispatcher, provider):
    text = "The quick brown fox jumps over the lazy dog."
    dispatcher.handle(GenerateRequest(mode=Mode.SUMMARIZE, prompt=text))

    expected = SUMMARY_TEMPLATE.format(language="English") + text
    assert provider.calls == [[TextPart(text=expected)]]


def test_summary_language_is_configurable():
    provider = FakeProvider()
    Dispatcher(provider, summary_language="Indonesian").handle(GenerateRequest(mode=Mode.SUMMARIZE, prompt="Some text"))

    assert provider.calls[0][0].text.startswith("Summarize the following content concisely in Indonesian:\n\n")


def test_provider_error_becomes_500():
    provider = FakeProvider(error=ConnectionError("upstream unavailable"))
    result = Dispatcher(provider).handle(GenerateRequest(mode=Mode.CHAT, prompt="Hello"))

    assert result == GenerateErrorResponse(error="upstream unavailable", status_code=500)
    assert len(provider.calls) == 1


def test_provider_error_without_message_uses_fallback():
    provider = FakeProvider(error=RuntimeError())
    result = Dispatcher(provider).handle(GenerateRequest(mode=Mode.CHAT, prompt="Hello"))

    assert result == GenerateErrorResponse(error="Failed to generate response", status_code=500)


def test_provider_failure_message_is_kept():
    provider = FakeProvider(error=ProviderFailure("Gemini blocked the request: SAFETY"))
    result = Dispatcher(provider).handle(GenerateRequest(mode=Mode.VISION, prompt="x", image=ImageAttachment(data=b"1", mime_type="image/jpeg")))

    assert result.status_code == 500
    assert result.error == "Gemini blocked the request: SAFETY"


def test_contains_url():
    assert contains_url("see www.example.com")
    assert contains_url("https://example.com")
    assert not contains_url("a plain paragraph about the web")
    assert not contains_url("")


def test_default_refusal_matches_default_summary_language():
    provider = FakeProvider()
    dispatcher = Dispatcher(provider)

    result = dispatcher.handle(GenerateRequest(mode=Mode.SUMMARIZE, prompt="https://example.com"))
    dispatcher.handle(GenerateRequest(mode=Mode.SUMMARIZE, prompt="Some text"))

    assert result.text == LINK_REFUSAL_MESSAGES["indonesian"]
    assert result.text.startswith("Maaf")
    assert "in Indonesian" in provider.calls[0][0].text


def test_refusal_falls_back_to_english_for_other_languages():
    assert link_refusal_message("German") == LINK_REFUSAL_MESSAGE
    assert link_refusal_message(" english ") == LINK_REFUSAL_MESSAGE
