from api.conversations.schemas import ConversationListResponse, ConversationRecord
from conversation_store import ConversationStore


def list_user_conversations(store: ConversationStore, user_id: str, limit: int) -> ConversationListResponse:
    docs = store.list_conversations(user_id, limit=limit)
    return ConversationListResponse(items=[ConversationRecord(**doc) for doc in docs])
