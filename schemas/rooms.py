from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    rooms: int


class RoomDetailsResponse(BaseModel):
    room_id: str
    viewers: int
