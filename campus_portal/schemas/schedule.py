from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from campus_portal.models.enums import TestStatus
from campus_portal.schemas.section import SectionOut


class EnrollIn(BaseModel):
    section_id: int


class EnrollmentTestBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    test_id: int
    score: int
    attempts: int
    status: TestStatus


class TestBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    description: str
    max_attempts: int
    slug: str


class ScheduleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    section_id: int
    created_at: Optional[datetime] = None
    section: SectionOut
    tests: List[EnrollmentTestBrief] = []


class ScheduleWithTestsOut(ScheduleOut):
    section_tests: List[TestBrief] = []


class SectionBrowseOut(SectionOut):
    enrolled_count: int = 0
    is_enrolled: bool = False
    schedule_id: Optional[int] = None


class ClassDetailOut(SectionOut):
    schedule_id: int
    tests: List[TestBrief] = []
