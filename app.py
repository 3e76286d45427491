from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from routers.rooms import rooms_router
from connection import Connection
from server import Server
from constants import LOG_LEVEL, LOG_FILE
from logging_config import get_logger, setup_logging

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # The room registry lives exactly as long as the process serves requests.
    # State is in memory only and is lost on restart.
    app.state.relay = Server()
    logger.info("Relay room registry created")
    yield
    app.state.relay.shutdown()


app = FastAPI(lifespan=lifespan)

# Configure CORS to allow all origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins
    allow_credentials=True,
    allow_methods=["*"],  # Allow all HTTP methods
    allow_headers=["*"],  # Allow all headers
)

app.include_router(rooms_router)

logger.info("FastAPI application initialized")


@app.websocket("/{path:path}")
async def websocket_endpoint(websocket: WebSocket, path: str):
    """Signaling socket. Browsers open it on the page URL, so any path is accepted.

    The peer must send ``{"type": "join", "roomId": ...}`` before anything else
    is looked at. Everything after that is handled by the room it joined.
    """
    await websocket.accept()
    connection = Connection(websocket)
    client = f"{websocket.client.host}:{websocket.client.port}" if websocket.client else "?"
    logger.info(f"WebSocket connection {connection.connection_id} accepted from {client} on /{path}")

    websocket.app.state.relay.on_connection(connection)
    try:
        await connection.serve()
    except Exception as e:
        logger.error(f"WebSocket error for connection {connection.connection_id}: {e}", exc_info=True)
    finally:
        logger.info(f"WebSocket connection {connection.connection_id} closed")
