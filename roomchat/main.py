import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncSession

from roomchat.config import Settings, settings as default_settings
from roomchat.database import build_engine, build_session_factory, create_tables, get_db, ping
from roomchat.errors import register_exception_handlers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables(app.state.engine)
    logger.info("%s %s started", app.state.settings.APP_NAME, app.state.settings.VERSION)
    yield
    await app.state.engine.dispose()
    logger.info("%s stopped", app.state.settings.APP_NAME)


def create_app(settings: Settings = None) -> FastAPI:
    settings = settings or default_settings
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)-7s %(name)s - %(message)s",
    )

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        description="Multi-user chat rooms with bearer token sessions",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    from roomchat.api.v1 import account, chat, users

    app.include_router(account.router, prefix="/api/v1/account", tags=["account"])
    app.include_router(chat.router, prefix="/api/v1/chat", tags=["chat"])
    app.include_router(users.router, prefix="/api/v1/users", tags=["users"])

    @app.get("/")
    async def root():
        return {"message": settings.APP_NAME, "version": settings.VERSION}

    @app.get("/health")
    async def health(db: AsyncSession = Depends(get_db)):
        await ping(db)
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("roomchat.main:app", host=default_settings.HOST, port=default_settings.PORT)
