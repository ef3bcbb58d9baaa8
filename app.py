from fastapi import Depends, FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from starlette.websockets import WebSocketState
from pydantic import ValidationError
from routers.rooms import rooms_router
from registry import RoomRegistry, get_registry
from connections import connection_manager
from schemas.events import Connected, ErrorMsg, InboundMessage, JoinRequest, SignalRequest
from schemas.rooms import HealthResponse
from constants import CORS_ORIGINS, LOG_LEVEL, LOG_FILE
from logging_config import get_logger, setup_logging
import uuid
import json

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)

app = FastAPI()

# Configure CORS (all origins unless CORS_ORIGINS narrows it)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(rooms_router)

logger.info("FastAPI application initialized")


@app.get("/", response_model=HealthResponse)
async def health_check(registry: RoomRegistry = Depends(get_registry)):
    return HealthResponse(
        status="online",
        service="pairrelay-signaling",
        rooms=registry.room_count(),
        connections=len(connection_manager),
    )


async def handle_message(connection_id: str, raw: str, registry: RoomRegistry):
    """Dispatch one inbound frame from a connection to the registry."""
    try:
        message = InboundMessage.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Invalid frame from connection {connection_id}: {e}")
        connection_manager.send(connection_id, ErrorMsg(message="invalid message"))
        return

    data = message.data if isinstance(message.data, dict) else {}

    if message.event == "join":
        try:
            request = JoinRequest.model_validate(data)
        except ValidationError:
            logger.warning(f"Invalid join payload from connection {connection_id}")
            connection_manager.send(connection_id, ErrorMsg(message="invalid message"))
            return
        result = await registry.join(connection_id, request.room_id)
        connection_manager.deliver(result.deliveries)

    elif message.event == "signal":
        try:
            request = SignalRequest.model_validate(data)
        except ValidationError:
            # malformed signals are dropped like incomplete ones
            logger.debug(f"Dropping invalid signal payload from connection {connection_id}")
            return
        connection_manager.deliver(await registry.signal(connection_id, request.to, request.data))

    else:
        logger.debug(f"Ignoring unknown event '{message.event}' from connection {connection_id}")


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, registry: RoomRegistry = Depends(get_registry)):
    """Signaling socket: one logical peer per connection.

    Frames in both directions are JSON objects ``{"event": ..., "data": {...}}``.
    Closing the socket removes the peer from every room it joined.
    """
    await websocket.accept()
    connection_id = str(uuid.uuid4())
    connection_manager.register(connection_id, websocket)
    logger.info(f"Socket connected: {connection_id}")
    connection_manager.send(connection_id, Connected(socket_id=connection_id))

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            raw = frame.get("text")
            if raw is None:
                # binary frames carry the same JSON envelope
                raw = (frame.get("bytes") or b"").decode("utf-8", errors="replace")
            await handle_message(connection_id, raw, registry)
    except WebSocketDisconnect:
        logger.info(f"Socket disconnected: {connection_id}")
    except Exception as e:
        logger.error(f"WebSocket error for connection {connection_id}: {e}", exc_info=True)
    finally:
        connection_manager.deliver(await registry.leave(connection_id))
        await connection_manager.unregister(connection_id)
        if websocket.client_state == WebSocketState.CONNECTED:
            try:
                await websocket.close()
            except Exception as e:
                logger.debug(f"Error closing WebSocket: {e}")
