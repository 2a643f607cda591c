
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from campus_portal.database import Base
from campus_portal.models.enums import UserRole

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(Enum(UserRole, name="user_role"), nullable=False, default=UserRole.STUDENT, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    last_password_reset_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # FACULTY: sections taught / STUDENT: enrollments
    sections = relationship("Section", back_populates="faculty")
    schedules = relationship("StudentSchedule", back_populates="student", cascade="all, delete-orphan")
