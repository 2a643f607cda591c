from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class RoomIn(BaseModel):
    no: str = Field(..., min_length=1, max_length=50)
    max_capacity: int = Field(..., ge=1)


class RoomUpdate(BaseModel):
    no: Optional[str] = Field(None, min_length=1, max_length=50)
    max_capacity: Optional[int] = Field(None, ge=1)


class RoomOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    no: str
    max_capacity: int
