import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field


DEFAULT_MODEL = "gemini-2.5-flash"


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    gemini_api_key: str | None = None
    gemini_model: str = DEFAULT_MODEL
    summary_language: str = "Indonesian"
    service_api_key: str = ""
    allowed_ips: frozenset[str] = Field(default_factory=frozenset)
    mongodb_uri: str | None = None
    mongodb_db: str = "chat_app"
    mongodb_collection: str = "conversations"
    log_level: str = "INFO"
    cors_origin_regex: str = ".*"

    @property
    def persistence_enabled(self) -> bool:
        return bool(self.mongodb_uri)


def _split_csv(value: str) -> frozenset[str]:
    return frozenset(item.strip() for item in value.split(",") if item.strip())


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
        gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
        summary_language=os.getenv("SUMMARY_LANGUAGE", "Indonesian"),
        service_api_key=os.getenv("SERVICE_API_KEY", ""),
        allowed_ips=_split_csv(os.getenv("ALLOWED_IPS", "")),
        mongodb_uri=os.getenv("MONGODB_URI") or None,
        mongodb_db=os.getenv("MONGODB_DB", "chat_app"),
        mongodb_collection=os.getenv("MONGODB_COLLECTION", "conversations"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origin_regex=os.getenv("CORS_ORIGIN_REGEX", ".*"),
    )
