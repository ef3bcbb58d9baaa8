from fastapi import APIRouter, Depends, HTTPException, Request
from schemas.rooms import CreateRoomResponse, RoomDetailsResponse
from registry import RoomRegistry, get_registry
from logging_config import get_logger

logger = get_logger(__name__)

rooms_router = APIRouter(tags=["rooms"])


@rooms_router.get("/create-room", response_model=CreateRoomResponse)
async def create_room(request: Request, registry: RoomRegistry = Depends(get_registry)):
    """Allocate a fresh room id for a "create room" button on the frontend."""
    client_host = request.client.host if request.client else "unknown"
    room_id = await registry.create_room()
    logger.info(f"Room {room_id} allocated for {client_host}")
    return CreateRoomResponse(room_id=room_id)


@rooms_router.get("/rooms/{room_id}", response_model=RoomDetailsResponse)
async def get_room_details(room_id: str, registry: RoomRegistry = Depends(get_registry)):
    """
    Get current occupancy of a room.

    Returns:
    - roomId: Room identifier
    - memberCount: Number of connections currently in the room
    - capacity: Maximum members allowed
    - isFull: Whether another peer would be refused
    """
    members = registry.get_members(room_id)
    if members is None:
        logger.warning(f"Room details failed: Room {room_id} not found")
        raise HTTPException(status_code=404, detail="Room not found")

    logger.debug(f"Room details retrieved for {room_id}: {len(members)}/{registry.capacity} members")
    return RoomDetailsResponse(
        room_id=room_id,
        member_count=len(members),
        capacity=registry.capacity,
        is_full=len(members) >= registry.capacity,
    )
