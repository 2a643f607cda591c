from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from campus_portal.database import Base


class Test(Base):
    __tablename__ = "tests"
    # keep pytest from collecting the model
    __test__ = False
    __table_args__ = (
        CheckConstraint("max_attempts >= 1", name="ck_tests_max_attempts"),
    )

    id = Column(Integer, primary_key=True, index=True)
    section_id = Column(Integer, ForeignKey("sections.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    max_attempts = Column(Integer, nullable=False, default=1)
    slug = Column(String(64), unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    section = relationship("Section", back_populates="tests")
    questions = relationship("Question", back_populates="test", cascade="all, delete-orphan", order_by="Question.id")
    students = relationship("EnrollmentTest", back_populates="test", cascade="all, delete-orphan")


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    test_id = Column(Integer, ForeignKey("tests.id", ondelete="CASCADE"), nullable=False, index=True)
    question = Column(Text, nullable=False)
    # four option strings
    options = Column(JSON, nullable=False)
    # 1-based index into options
    answer = Column(Integer, nullable=False)

    test = relationship("Test", back_populates="questions")
