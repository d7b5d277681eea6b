import base64
import logging
import re
from enum import Enum
from typing import Callable, Literal, Protocol

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


URL_PATTERN = re.compile(r"(https?://\S+)|(www\.\S+)", re.IGNORECASE)

LINK_REFUSAL_MESSAGE = (
    "Sorry, the summarize feature can only summarize text for now. "
    "Please don't send a link; copy and paste the full text of the article you want summarized instead."
)

LINK_REFUSAL_MESSAGES = {
    "english": LINK_REFUSAL_MESSAGE,
    "indonesian": (
        "Maaf, untuk saat ini fitur summarize hanya dapat meringkas teks. "
        "Mohon jangan masukkan link, tetapi salin dan tempel teks lengkap dari artikel yang ingin diringkas."
    ),
}

SUMMARY_TEMPLATE = "Summarize the following content concisely in {language}:\n\n"

GENERIC_FAILURE_MESSAGE = "Failed to generate response"


class Mode(str, Enum):
    CHAT = "chat"
    SUMMARIZE = "summarize"
    VISION = "vision"


class ImageAttachment(BaseModel):
    data: bytes
    mime_type: str


class GenerateRequest(BaseModel):
    mode: Mode | None = None
    prompt: str | None = None
    image: ImageAttachment | None = None


class TextPart(BaseModel):
    kind: Literal["text"] = "text"
    text: str


class InlineDataPart(BaseModel):
    kind: Literal["inline_data"] = "inline_data"
    data: str = Field(..., description="Base64 encoded payload")
    mime_type: str


ModelPart = TextPart | InlineDataPart


class GenerateResponse(BaseModel):
    text: str


class GenerateErrorResponse(BaseModel):
    error: str
    status_code: int


class InvalidRequest(ValueError):
    status_code = 400


class ProviderFailure(RuntimeError):
    status_code = 500


class Provider(Protocol):
    def generate(self, parts: list[ModelPart]) -> str: ...


def contains_url(text: str) -> bool:
    return URL_PATTERN.search(text or "") is not None


def image_to_part(image: ImageAttachment) -> InlineDataPart:
    encoded = base64.b64encode(image.data).decode("ascii")
    return InlineDataPart(data=encoded, mime_type=image.mime_type)


def link_refusal_message(language: str) -> str:
    return LINK_REFUSAL_MESSAGES.get(language.strip().lower(), LINK_REFUSAL_MESSAGE)


def build_summary_prompt(prompt: str, language: str) -> str:
    return SUMMARY_TEMPLATE.format(language=language) + prompt


class Dispatcher:
    def __init__(self, provider: Provider, summary_language: str = "Indonesian") -> None:
        self._provider = provider
        self._summary_language = summary_language
        self._handlers: dict[Mode, Callable[[GenerateRequest], GenerateResponse]] = {
            Mode.CHAT: self._handle_chat,
            Mode.SUMMARIZE: self._handle_summarize,
            Mode.VISION: self._handle_vision,
        }

    def handle(self, request: GenerateRequest) -> GenerateResponse | GenerateErrorResponse:
        try:
            self.validate(request)
            return self._handlers[request.mode](request)
        except InvalidRequest as exc:
            logger.info("Rejected generate request mode=%s reason=%s", getattr(request.mode, "value", None), exc)
            return GenerateErrorResponse(error=str(exc), status_code=InvalidRequest.status_code)
        except ProviderFailure as exc:
            return GenerateErrorResponse(
                error=str(exc) or GENERIC_FAILURE_MESSAGE,
                status_code=ProviderFailure.status_code,
            )

    @staticmethod
    def validate(request: GenerateRequest) -> None:
        if request.mode is None or not (request.prompt or "").strip():
            raise InvalidRequest("Prompt and mode are required")
        if request.mode is Mode.VISION and (request.image is None or not request.image.data):
            raise InvalidRequest("Image file is required for vision mode")

    def _handle_chat(self, request: GenerateRequest) -> GenerateResponse:
        return self._invoke([TextPart(text=request.prompt)])

    def _handle_summarize(self, request: GenerateRequest) -> GenerateResponse:
        if contains_url(request.prompt):
            logger.info("Link detected in summarize mode, returning refusal message")
            return GenerateResponse(text=link_refusal_message(self._summary_language))
        full_prompt = build_summary_prompt(request.prompt, self._summary_language)
        return self._invoke([TextPart(text=full_prompt)])

    def _handle_vision(self, request: GenerateRequest) -> GenerateResponse:
        return self._invoke([TextPart(text=request.prompt), image_to_part(request.image)])

    def _invoke(self, parts: list[ModelPart]) -> GenerateResponse:
        try:
            text = self._provider.generate(parts)
        except ProviderFailure:
            raise
        except Exception as exc:
            logger.exception("Provider call failed")
            raise ProviderFailure(str(exc) or GENERIC_FAILURE_MESSAGE) from exc
        return GenerateResponse(text=text)
