import logging
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.conversations.router import router as conversations_router
from api.generate.router import router as generate_router
from api.security import verify_api_access
from conversation_store import ConversationStore
from dispatcher import Dispatcher
from gemini_chat import GeminiProvider
from settings import Settings, load_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if app.state.dispatcher is None:
        # Fails startup when no Gemini API key is configured.
        provider = GeminiProvider.from_settings(settings)
        app.state.dispatcher = Dispatcher(provider, summary_language=settings.summary_language)
        logger.info("Gemini provider ready model=%s", settings.gemini_model)
    owned_store = None
    if app.state.conversation_store is None and settings.persistence_enabled:
        owned_store = ConversationStore.from_settings(settings)
        app.state.conversation_store = owned_store
        logger.info("Conversation history enabled db=%s collection=%s", settings.mongodb_db, settings.mongodb_collection)
    yield
    if owned_store is not None:
        owned_store.close()
        app.state.conversation_store = None


def create_app(
    settings: Settings | None = None,
    dispatcher: Dispatcher | None = None,
    conversation_store: ConversationStore | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Gemini Chat API",
        version="1.0.0",
        lifespan=lifespan,
        dependencies=[Depends(verify_api_access)],
    )
    app.state.settings = settings
    app.state.dispatcher = dispatcher
    app.state.conversation_store = conversation_store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[],
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(generate_router)
    app.include_router(conversations_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
