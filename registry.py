import asyncio
import math
import secrets
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from constants import ROOM_CAPACITY, ROOM_ID_LENGTH, STRICT_SIGNALING
from logging_config import get_logger
from schemas.events import ErrorMsg, Joined, OutboundEvent, PeerJoined, PeerLeft, RoomFull, SignalForward

logger = get_logger(__name__)


class RejectReason(str, Enum):
    NO_ROOM_ID = "no_room_id"
    ROOM_FULL = "room_full"


@dataclass
class Delivery:
    """Instruction for the gateway: push ``message`` to ``connection_id``."""
    connection_id: str
    message: OutboundEvent


@dataclass
class JoinResult:
    room_id: Optional[str]
    peers: List[str] = field(default_factory=list)
    rejected: Optional[RejectReason] = None
    deliveries: List[Delivery] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.rejected is None


def make_room_id(length: int = ROOM_ID_LENGTH) -> str:
    """Short url-safe id from a cryptographically random source."""
    return secrets.token_urlsafe(math.ceil(length * 3 / 4))[:length]


class RoomRegistry:
    """Owns every room and its members.

    Rooms map a room id to the connection ids inside it, kept in join order
    (a dict used as an ordered set). All mutations run under one lock so the
    capacity check, the membership change and the peer list a join reports
    are observed together. Nothing here awaits I/O: operations return
    ``Delivery`` instructions and the caller does the sending.
    """

    def __init__(self, capacity: int = ROOM_CAPACITY, strict_signaling: bool = STRICT_SIGNALING):
        self.capacity = capacity
        self.strict_signaling = strict_signaling
        self._rooms: Dict[str, Dict[str, None]] = {}
        self._lock = asyncio.Lock()
        logger.info(f"Initializing RoomRegistry (capacity={capacity}, strict_signaling={strict_signaling})")

    async def create_room(self) -> str:
        async with self._lock:
            room_id = make_room_id()
            while room_id in self._rooms:
                room_id = make_room_id()
            self._rooms[room_id] = {}
        logger.info(f"Room {room_id} created")
        return room_id

    async def join(self, connection_id: str, room_id: Optional[str]) -> JoinResult:
        if not room_id:
            logger.warning(f"Join rejected for {connection_id}: no roomId provided")
            return JoinResult(
                room_id=None,
                rejected=RejectReason.NO_ROOM_ID,
                deliveries=[Delivery(connection_id, ErrorMsg(message="no roomId provided"))],
            )

        async with self._lock:
            members = self._rooms.get(room_id)
            if members is None:
                # unknown rooms are created on first join
                members = {}
                self._rooms[room_id] = members
                logger.debug(f"Room {room_id} materialized by join from {connection_id}")

            if len(members) >= self.capacity:
                logger.warning(f"Join rejected for {connection_id}: room {room_id} is full ({len(members)}/{self.capacity})")
                return JoinResult(
                    room_id=room_id,
                    rejected=RejectReason.ROOM_FULL,
                    deliveries=[Delivery(connection_id, RoomFull(room_id=room_id))],
                )

            members[connection_id] = None
            peers = [member for member in members if member != connection_id]

            deliveries = [Delivery(connection_id, Joined(room_id=room_id, peers=peers))]
            deliveries.extend(Delivery(peer, PeerJoined(socket_id=connection_id)) for peer in peers)

            logger.info(f"Connection {connection_id} joined room {room_id} (size={len(members)})")
            return JoinResult(room_id=room_id, peers=peers, deliveries=deliveries)

    async def signal(self, from_id: str, to_id: Optional[str], data: Any) -> List[Delivery]:
        """Forward an opaque negotiation payload from one connection to another.

        Missing ``to_id`` or ``data`` drops the signal without telling the
        sender. ``data`` is passed through untouched.
        """
        if not to_id or data is None:
            logger.debug(f"Dropping malformed signal from {from_id}")
            return []

        if self.strict_signaling:
            async with self._lock:
                shared = any(from_id in members and to_id in members for members in self._rooms.values())
            if not shared:
                logger.warning(f"Dropping signal from {from_id} to {to_id}: not in the same room")
                return []

        signal_type = data.get("type") if isinstance(data, dict) else None
        logger.debug(f"Forwarding signal {signal_type or 'unknown'} from {from_id} to {to_id}")
        return [Delivery(to_id, SignalForward(sender=from_id, data=data))]

    async def leave(self, connection_id: str) -> List[Delivery]:
        """Remove a connection from every room it is in and notify whoever remains."""
        deliveries = []
        async with self._lock:
            for room_id, members in list(self._rooms.items()):
                if connection_id not in members:
                    continue
                del members[connection_id]
                deliveries.extend(Delivery(member, PeerLeft(socket_id=connection_id)) for member in members)
                logger.info(f"Connection {connection_id} left room {room_id}")
                if not members:
                    del self._rooms[room_id]
                    logger.info(f"Room {room_id} deleted")
        return deliveries

    def get_members(self, room_id: str) -> Optional[List[str]]:
        members = self._rooms.get(room_id)
        if members is None:
            return None
        return list(members)

    def has_room(self, room_id: str) -> bool:
        return room_id in self._rooms

    def room_count(self) -> int:
        return len(self._rooms)


room_registry = RoomRegistry()


def get_registry() -> RoomRegistry:
    return room_registry
