import logging

from fastapi import BackgroundTasks

from conversation_store import ConversationStore
from dispatcher import (
    Dispatcher,
    GenerateErrorResponse,
    GenerateRequest,
    GenerateResponse,
    ImageAttachment,
    Mode,
)
from utils import _clean_optional_text

logger = logging.getLogger(__name__)


def parse_submission(
    *,
    prompt: str | None,
    mode: str | None,
    image: ImageAttachment | None,
) -> GenerateRequest | GenerateErrorResponse:
    raw_mode = _clean_optional_text(mode).lower()
    parsed_mode = None
    if raw_mode:
        try:
            parsed_mode = Mode(raw_mode)
        except ValueError:
            allowed = ", ".join(m.value for m in Mode)
            return GenerateErrorResponse(error=f"Unsupported mode '{mode}'. Use one of: {allowed}", status_code=400)

    # Images only travel with vision requests.
    attachment = image if parsed_mode is Mode.VISION else None
    return GenerateRequest(mode=parsed_mode, prompt=prompt, image=attachment)


def generate(
    request: GenerateRequest,
    *,
    dispatcher: Dispatcher,
    store: ConversationStore | None,
    user_id: str | None,
    background_tasks: BackgroundTasks,
) -> GenerateResponse | GenerateErrorResponse:
    result = dispatcher.handle(request)
    if isinstance(result, GenerateResponse) and store is not None and user_id:
        background_tasks.add_task(
            store.record_exchange,
            user_id=user_id,
            prompt=request.prompt,
            response=result.text,
            mode=request.mode.value,
        )
    return result
