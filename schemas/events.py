from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, ClassVar, Optional


class InboundMessage(BaseModel):
    event: str
    data: Any = None


class JoinRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: Optional[str] = Field(default=None, alias="roomId")

    @field_validator("room_id", mode="before")
    @classmethod
    def coerce_numeric_room_id(cls, value):
        # numeric ids are used as keys like any other; 0 counts as missing
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value) if value else None
        return value


class SignalRequest(BaseModel):
    to: Optional[str] = None
    data: Any = None


class OutboundEvent(BaseModel):
    """Base for every event the relay pushes to a connection.

    ``event`` is the wire event name; the model fields form the payload and
    are serialized with their camelCase aliases.
    """
    model_config = ConfigDict(populate_by_name=True)

    event: ClassVar[str]

    def envelope(self) -> dict:
        return {"event": self.event, "data": self.model_dump(by_alias=True)}


class Connected(OutboundEvent):
    event: ClassVar[str] = "connected"

    socket_id: str = Field(alias="socketId")


class Joined(OutboundEvent):
    event: ClassVar[str] = "joined"

    room_id: str = Field(alias="roomId")
    peers: list[str]


class ErrorMsg(OutboundEvent):
    event: ClassVar[str] = "error-msg"

    message: str


class RoomFull(OutboundEvent):
    event: ClassVar[str] = "room-full"

    room_id: str = Field(alias="roomId")


class PeerJoined(OutboundEvent):
    event: ClassVar[str] = "peer-joined"

    socket_id: str = Field(alias="socketId")


class PeerLeft(OutboundEvent):
    event: ClassVar[str] = "peer-left"

    socket_id: str = Field(alias="socketId")


class SignalForward(OutboundEvent):
    event: ClassVar[str] = "signal"

    sender: str = Field(alias="from")
    data: Any
