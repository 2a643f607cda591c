
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional


class CourseIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=32)

    @field_validator("code")
    @classmethod
    def _normalize_code(cls, v: str) -> str:
        # "math 101" -> "MATH-101"
        return "-".join(v.strip().upper().split())


class CourseUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    code: Optional[str] = Field(None, min_length=1, max_length=32)

    @field_validator("code")
    @classmethod
    def _normalize_code(cls, v):
        if v is None:
            return v
        return "-".join(v.strip().upper().split())


class CourseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    code: str
