from typing import Annotated

from fastapi import Depends, Request

from api.security import get_user_id
from conversation_store import ConversationStore
from dispatcher import Dispatcher


def get_dispatcher(request: Request) -> Dispatcher:
    return request.app.state.dispatcher


def get_conversation_store(request: Request) -> ConversationStore | None:
    return request.app.state.conversation_store


DispatcherDependency = Annotated[Dispatcher, Depends(get_dispatcher)]
ConversationStoreDependency = Annotated[ConversationStore | None, Depends(get_conversation_store)]
UserIdDependency = Annotated[str | None, Depends(get_user_id)]
