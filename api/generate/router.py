from fastapi import APIRouter, BackgroundTasks, File, Form, UploadFile
from fastapi.responses import JSONResponse

from api.dependencies import ConversationStoreDependency, DispatcherDependency, UserIdDependency
from api.generate.schemas import GenerateErrorBody, GenerateTextResponse
from dispatcher import GenerateErrorResponse
from utils import read_upload
from .service import generate, parse_submission

router = APIRouter(prefix="/api/generate")


def _error_response(result: GenerateErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=GenerateErrorBody(error=result.error).model_dump())


@router.post(
    "",
    response_model=GenerateTextResponse,
    responses={400: {"model": GenerateErrorBody}, 500: {"model": GenerateErrorBody}},
)
def generate_route(
    dispatcher: DispatcherDependency,
    store: ConversationStoreDependency,
    user_id: UserIdDependency,
    background_tasks: BackgroundTasks,
    prompt: str | None = Form(default=None),
    mode: str | None = Form(default=None),
    image: UploadFile | None = File(default=None),
):
    request = parse_submission(prompt=prompt, mode=mode, image=read_upload(image))
    if isinstance(request, GenerateErrorResponse):
        return _error_response(request)

    result = generate(
        request,
        dispatcher=dispatcher,
        store=store,
        user_id=user_id,
        background_tasks=background_tasks,
    )
    if isinstance(result, GenerateErrorResponse):
        return _error_response(result)
    return GenerateTextResponse(text=result.text)
