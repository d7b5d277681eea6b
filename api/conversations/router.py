from fastapi import APIRouter, HTTPException, Query

from api.conversations.schemas import ConversationListResponse
from api.dependencies import ConversationStoreDependency, UserIdDependency
from .service import list_user_conversations

router = APIRouter(prefix="/api/conversations")


@router.get("", response_model=ConversationListResponse)
def list_conversations_route(
    store: ConversationStoreDependency,
    user_id: UserIdDependency,
    limit: int = Query(default=20, ge=1, le=100),
):
    try:
        if store is None:
            raise HTTPException(status_code=503, detail="Conversation history is not configured. Set MONGODB_URI.")
        if not user_id:
            raise ValueError("Missing X-User-Id header.")
        return list_user_conversations(store, user_id, limit)
    except HTTPException:
        raise
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Failed to load conversations: {exc}") from exc
