import logging
from datetime import datetime, timezone

from pymongo import DESCENDING, MongoClient

from settings import Settings

logger = logging.getLogger(__name__)


def _serialize(doc: dict) -> dict:
    doc["id"] = str(doc.pop("_id"))
    if "created_at" in doc and isinstance(doc["created_at"], datetime):
        doc["created_at"] = doc["created_at"].isoformat()
    return doc


class ConversationStore:
    def __init__(self, collection, client: MongoClient | None = None) -> None:
        self._collection = collection
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConversationStore":
        client = MongoClient(settings.mongodb_uri)
        return cls(client[settings.mongodb_db][settings.mongodb_collection], client=client)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def save_conversation(self, *, user_id: str, prompt: str, response: str, mode: str) -> str:
        payload = {
            "user_id": user_id,
            "prompt": prompt,
            "response": response,
            "mode": mode,
            "created_at": datetime.now(timezone.utc),
        }
        result = self._collection.insert_one(payload)
        return str(result.inserted_id)

    def record_exchange(self, *, user_id: str, prompt: str, response: str, mode: str) -> None:
        # Runs as a background task after the response is sent.
        try:
            conversation_id = self.save_conversation(user_id=user_id, prompt=prompt, response=response, mode=mode)
            logger.info("Saved conversation id=%s user_id=%s mode=%s", conversation_id, user_id, mode)
        except Exception:
            logger.exception("Failed to save conversation for user_id=%s", user_id)

    def list_conversations(self, user_id: str, limit: int = 20) -> list[dict]:
        cursor = self._collection.find({"user_id": user_id}).sort("created_at", DESCENDING).limit(limit)
        return [_serialize(doc) for doc in cursor]
