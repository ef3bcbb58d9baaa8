from pydantic import BaseModel, ConfigDict, Field


class CreateRoomResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: str = Field(alias="roomId")

class RoomDetailsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: str = Field(alias="roomId")
    member_count: int = Field(alias="memberCount")
    capacity: int
    is_full: bool = Field(alias="isFull")

class HealthResponse(BaseModel):
    status: str
    service: str
    rooms: int
    connections: int
