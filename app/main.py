import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.routers import ws
from app.services.room import RoomRegistry
from app.services.websocket import ConnectionManager

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Domino Rooms API")
    logger.debug("Debug mode: %s", settings.DEBUG)

    # Rooms live in memory for the lifetime of the process
    app.state.room_registry = RoomRegistry()

    connection_manager = ConnectionManager(settings)
    app.state.connection_manager = connection_manager
    await connection_manager.start_cleanup_task()
    logger.info("WebSocket connection manager initialized")

    yield

    logger.info("Shutting down Domino Rooms API")
    await connection_manager.stop_cleanup_task()
    await connection_manager.close_all_connections()
    logger.info("WebSocket cleanup complete, %d rooms dropped", len(app.state.room_registry))


app = FastAPI(
    title="Domino Rooms API",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
logger.debug("CORS configured with origins: %s", settings.CORS_ORIGINS)

app.include_router(ws.router, prefix="/api/v1")
logger.debug("Routers registered: /api/v1/ws")


@app.get("/")
def root():
    return {"message": "Domino Rooms API"}


@app.get("/health")
def health(request: Request):
    return {
        "status": "healthy",
        "rooms": len(request.app.state.room_registry),
        "connections": request.app.state.connection_manager.get_total_connection_count(),
    }
