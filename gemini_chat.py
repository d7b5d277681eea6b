import base64
import logging
import mimetypes
import sys
from pathlib import Path
from typing import Optional

from google import genai
from google.genai import types

from dispatcher import (
    Dispatcher,
    GenerateErrorResponse,
    GenerateRequest,
    ImageAttachment,
    InlineDataPart,
    Mode,
    ModelPart,
    ProviderFailure,
    TextPart,
)
from settings import DEFAULT_MODEL, Settings, load_settings

logger = logging.getLogger(__name__)


SAFETY_SETTINGS = [
    types.SafetySetting(category=category, threshold=types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE)
    for category in (
        types.HarmCategory.HARM_CATEGORY_HARASSMENT,
        types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
        types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
        types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
    )
]


def get_api_key(settings: Settings | None = None) -> str:
    resolved = settings or load_settings()
    api_key = (resolved.gemini_api_key or "").strip()
    if not api_key:
        raise RuntimeError(
            "No API key found. Set GEMINI_API_KEY (or GOOGLE_API_KEY) in your environment or .env file."
        )
    return api_key


def to_genai_part(part: ModelPart) -> types.Part:
    if isinstance(part, InlineDataPart):
        return types.Part.from_bytes(data=base64.b64decode(part.data), mime_type=part.mime_type)
    return types.Part.from_text(text=part.text)


class GeminiProvider:
    def __init__(self, client: genai.Client, model_name: str = DEFAULT_MODEL) -> None:
        self.client = client
        self.model_name = model_name
        self.config = types.GenerateContentConfig(safety_settings=SAFETY_SETTINGS)

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiProvider":
        return cls(genai.Client(api_key=get_api_key(settings)), model_name=settings.gemini_model)

    def generate(self, parts: list[ModelPart]) -> str:
        prompt_len = sum(len(part.text) for part in parts if isinstance(part, TextPart))
        logger.info("Calling Gemini model=%s parts=%d prompt_len=%d", self.model_name, len(parts), prompt_len)
        logger.debug("Prompt preview: %s", next((p.text for p in parts if isinstance(p, TextPart)), "")[:1000])

        contents = [types.Content(role="user", parts=[to_genai_part(part) for part in parts])]
        response = self.client.models.generate_content(
            model=self.model_name,
            contents=contents,
            config=self.config,
        )

        text = response.text
        if not text:
            feedback = getattr(response, "prompt_feedback", None)
            block_reason = getattr(feedback, "block_reason", None)
            if block_reason:
                raise ProviderFailure(f"Gemini blocked the request: {block_reason}")
            raise ProviderFailure("Gemini returned an empty response")

        logger.info("Gemini response received model=%s resp_len=%d", self.model_name, len(text))
        logger.debug("Response preview: %s", text[:1000])
        return text


def load_image(path: str) -> ImageAttachment:
    image_path = Path(path).expanduser()
    mime_type, _ = mimetypes.guess_type(image_path.name)
    return ImageAttachment(data=image_path.read_bytes(), mime_type=mime_type or "application/octet-stream")


def chat_loop(dispatcher: Dispatcher, mode: Mode = Mode.CHAT) -> None:
    print(f"Chat started in {mode.value} mode.")
    print("Commands: /mode <chat|summarize|vision>, /image <path>, exit\n")

    image: ImageAttachment | None = None
    while True:
        try:
            user_input = input(f"[{mode.value}] You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nGoodbye!")
            return

        if not user_input:
            continue
        if user_input.lower() in {"exit", "quit"}:
            print("Goodbye!")
            return

        if user_input.startswith("/mode"):
            try:
                mode = Mode(user_input.removeprefix("/mode").strip().lower())
                print(f"Switched to {mode.value} mode.\n")
            except ValueError:
                print(f"Unknown mode. Choose one of: {', '.join(m.value for m in Mode)}\n")
            continue

        if user_input.startswith("/image"):
            try:
                image = load_image(user_input.removeprefix("/image").strip())
                print(f"Attached image ({image.mime_type}, {len(image.data)} bytes).\n")
            except OSError as exc:
                print(f"Error: {exc}\n")
            continue

        result = dispatcher.handle(GenerateRequest(mode=mode, prompt=user_input, image=image))
        if isinstance(result, GenerateErrorResponse):
            print(f"Error: {result.error}\n")
            continue
        if mode is Mode.VISION:
            image = None
        print(f"Gemini: {result.text}\n")


def main(argv: Optional[list[str]] = None) -> int:
    args = argv if argv is not None else sys.argv[1:]

    try:
        mode = Mode(args[0]) if args else Mode.CHAT
    except ValueError:
        print(f"Unknown mode: {args[0]}")
        return 2

    try:
        settings = load_settings()
        dispatcher = Dispatcher(GeminiProvider.from_settings(settings), summary_language=settings.summary_language)
        chat_loop(dispatcher, mode=mode)
        return 0
    except Exception as exc:
        print(f"Startup error: {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
