#main.py
from pathlib import Path
from dotenv import load_dotenv
load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env")

from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends

import settings
from ai.client import OpenAIChatModel
from api.career import router as career_router
from core.auth_utils import get_current_user_id
from core.career_config import CareerConfigCache
from core.conversation_locks import ConversationLocks
from core.database import create_tables


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    yield


def create_app(*, llm=None, config_cache=None, init_db: bool = True) -> FastAPI:
    app = FastAPI(title="Career Discovery", lifespan=lifespan if init_db else None)
    app.state.llm = llm or OpenAIChatModel()
    app.state.config_cache = config_cache or CareerConfigCache(
        url=settings.CAREER_CONFIG_URL,
        ttl_seconds=settings.CAREER_CONFIG_TTL_SECONDS,
    )
    app.state.conversation_locks = ConversationLocks()
    app.include_router(career_router)

    @app.get("/")
    def health():
        return {"status": "ok"}

    @app.get("/me")
    def get_me(user_id: str = Depends(get_current_user_id)):
        return {"userId": user_id, "message": "Token is valid!"}

    return app


app = create_app()
