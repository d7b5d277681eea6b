from pydantic import BaseModel, ConfigDict


class ConversationRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str
    prompt: str
    response: str
    mode: str
    created_at: str | None = None


class ConversationListResponse(BaseModel):
    items: list[ConversationRecord]
