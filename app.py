from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from backend import RoomRegistry
from connection import WebSocketConnection
from constants import CODE_TTL_SECONDS, LOG_FILE, LOG_LEVEL
from expiry import ExpiryScheduler
from logging_config import get_logger, setup_logging
from routers.rooms import rooms_router
from schemas.rooms import HealthResponse
from session import SessionHandler
from signaling import RoomStateMachine

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Signaling server starting up")
    yield
    closed = app.state.rooms.close_all()
    logger.info(f"Signaling server shutting down, closed {closed} room(s)")


async def websocket_endpoint(websocket: WebSocket):
    """One peer's control channel: create/join a room, then relay negotiation messages."""
    rooms: RoomStateMachine = websocket.app.state.rooms

    await websocket.accept()
    connection = WebSocketConnection(websocket)
    connection.start()
    handler = SessionHandler(connection, rooms)
    client_host = websocket.client.host if websocket.client else "unknown"
    logger.info(f"Connection {connection.connection_id} opened from {client_host}")

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.info(f"Connection {connection.connection_id} disconnected (code {message.get('code')})")
                break
            data = message.get("text")
            if data is None:
                data = message.get("bytes")
            if data is None:
                continue
            handler.handle_frame(data)
    except Exception as e:
        logger.error(f"WebSocket error for connection {connection.connection_id}: {e}", exc_info=True)
    finally:
        # Disconnect runs the same teardown as an explicit hang-up
        handler.handle_close()
        await connection.close()


def create_app(idle_timeout: Optional[float] = None) -> FastAPI:
    """Build the application with its own registry, scheduler and state machine."""
    app = FastAPI(title="Signaling Relay", lifespan=lifespan)

    # Configure CORS to allow all origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    registry = RoomRegistry()
    scheduler = ExpiryScheduler(timeout=CODE_TTL_SECONDS if idle_timeout is None else idle_timeout)
    app.state.rooms = RoomStateMachine(registry, scheduler)

    app.include_router(rooms_router)
    app.add_api_websocket_route("/", websocket_endpoint)
    app.add_api_websocket_route("/ws", websocket_endpoint)

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        return HealthResponse(status="healthy", rooms=len(registry))

    logger.info(f"FastAPI application initialized (idle timeout {scheduler.timeout}s)")
    return app


app = create_app()
