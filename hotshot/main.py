import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from hotshot.api.routes import rooms, root
from hotshot.api.ws import router as ws_router
from hotshot.core.config import Settings, settings as default_settings
from hotshot.core.errors import HotShotError, StoreError
from hotshot.core.logging import configure_logging
from hotshot.db import create_engine, create_session_factory, init_db
from hotshot.services.change_feed import ChangeFeed
from hotshot.services.exporter import ResultsExporter
from hotshot.services.lifecycle import RoomLifecycle
from hotshot.services.store import RoomStore
from hotshot.services.voting import VotingEngine

logger = logging.getLogger(__name__)


async def startup(app: FastAPI, settings: Settings) -> None:
    """Build the store handle and services for this app instance."""
    engine = create_engine(settings.assembled_db_url)
    await init_db(engine)
    store = RoomStore(create_session_factory(engine), ChangeFeed())
    exporter = ResultsExporter(store)
    app.state.engine = engine
    app.state.store = store
    app.state.exporter = exporter
    app.state.lifecycle = RoomLifecycle(store, settings, exporter)
    app.state.voting = VotingEngine(store, settings)


async def shutdown(app: FastAPI) -> None:
    await app.state.engine.dispose()


async def handle_hotshot_error(request: Request, exc: HotShotError):
    if isinstance(exc, StoreError):
        logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings)
        await startup(app, settings)
        yield
        await shutdown(app)

    app = FastAPI(title="HotShot", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(HotShotError, handle_hotshot_error)

    app.mount("/static", StaticFiles(directory=settings.static_root), name="static")

    # HTTP routes
    app.include_router(root.router)
    app.include_router(rooms.router)

    # WebSocket routes
    app.include_router(ws_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("hotshot.main:app", host="0.0.0.0", port=8000, reload=True)
