from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Optional
import logging

from database import Settings, get_settings
from core.room_store import RoomStore
from api import games, players, rooms, websocket


def create_app(store: Optional[RoomStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    The RoomStore is injected (tests pass their own) or built from settings.
    Either way the lifespan opens it at startup and closes it at shutdown.
    """
    settings = settings or get_settings()
    store = store or RoomStore(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: open the store (creates tables)
        store.open()
        yield
        # Shutdown: release connections
        store.close()

    app = FastAPI(
        title="Ticket Draft API",
        description="Backend API for turn-based ticket draft rooms",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.store = store
    app.state.settings = settings

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(rooms.router)
    app.include_router(players.router)
    app.include_router(games.router)
    app.include_router(websocket.router)

    @app.get("/")
    def root():
        return {"message": "Ticket Draft API", "status": "ok"}

    @app.get("/health")
    def health():
        return {"status": "healthy" if store.is_open else "starting"}

    return app


logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
