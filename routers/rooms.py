from fastapi import APIRouter, HTTPException, Request
from schemas.rooms import HealthResponse, RoomDetailsResponse
from logging_config import get_logger

logger = get_logger(__name__)

rooms_router = APIRouter(tags=["rooms"])


@rooms_router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    relay = request.app.state.relay
    return HealthResponse(status="ok", rooms=relay.room_count)


@rooms_router.get("/rooms/{room_id}", response_model=RoomDetailsResponse)
async def get_room_details(room_id: str, request: Request):
    """
    Get the live viewer count of a room.

    Only counts are exposed; signaling payloads never leave the relay
    except towards the peers they are addressed to.
    """
    client_host = request.client.host if request.client else 'unknown'
    logger.info(f"Room details request for {room_id} from {client_host}")

    room = request.app.state.relay.get_room(room_id)
    if room is None:
        logger.debug(f"Room details failed: Room {room_id} not found")
        raise HTTPException(status_code=404, detail="Room not found")

    return RoomDetailsResponse(room_id=room.room_id, viewers=room.viewer_count)
