from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from campus_portal.models.enums import TestStatus
from campus_portal.schemas.user import UserBrief

OPTION_COUNT = 4


class TestCreateIn(BaseModel):
    section_id: int
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    max_attempts: int = Field(1, ge=1)


class QuestionIn(BaseModel):
    question: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=OPTION_COUNT, max_length=OPTION_COUNT)
    # 1-based
    answer: int = Field(..., ge=1, le=OPTION_COUNT)

    @field_validator("options")
    @classmethod
    def _options_not_blank(cls, v: List[str]) -> List[str]:
        cleaned = [o.strip() for o in v]
        for i, o in enumerate(cleaned, start=1):
            if not o:
                raise ValueError(f"Option {i} is required")
        return cleaned


class QuestionPublicOut(BaseModel):
    """What a student sees: no answer."""
    model_config = ConfigDict(from_attributes=True)
    id: int
    question: str
    options: List[str]


class QuestionOut(QuestionPublicOut):
    answer: int


class TestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    section_id: int
    name: str
    description: str
    max_attempts: int
    slug: str
    created_at: Optional[datetime] = None


class TestDetailOut(TestOut):
    questions: List[QuestionOut] = []
    student_count: int = 0


class TestPublicOut(TestOut):
    questions: List[QuestionPublicOut] = []


class EnrollmentTestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    enrollment_id: int
    test_id: int
    score: int
    attempts: int
    status: TestStatus


class StartTestOut(BaseModel):
    section_id: int
    test: TestPublicOut
    enrollment_test: EnrollmentTestOut


class SubmitQuizIn(BaseModel):
    test_id: int
    enrollment_test_id: int
    # one entry per question, in question order; None = left blank
    answers: List[Optional[int]] = []


class SubmitQuizOut(BaseModel):
    success: bool = True
    score: int
    total: int
    attempts: int
    status: TestStatus


class ScoreRowOut(BaseModel):
    enrollment_test_id: int
    student: UserBrief
    score: int
    total: int
    attempts: int
    status: TestStatus


class FacultyTestsOut(BaseModel):
    section_id: int
    section_name: str
    section_code: str
    course_name: str
    tests: List[TestOut] = []
