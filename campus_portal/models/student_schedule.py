from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from campus_portal.database import Base

class StudentSchedule(Base):
    __tablename__ = "student_schedules"
    __table_args__ = (
        UniqueConstraint("student_id", "section_id", name="uq_student_schedules_student_section"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    section_id = Column(Integer, ForeignKey("sections.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    student = relationship("User", back_populates="schedules")
    section = relationship("Section", back_populates="schedules")
    tests = relationship("EnrollmentTest", back_populates="enrollment", cascade="all, delete-orphan")
