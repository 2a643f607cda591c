
from sqlalchemy import Column, Integer, String, Time, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from campus_portal.database import Base
from campus_portal.models.enums import Day

class Section(Base):
    __tablename__ = "sections"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_sections_interval"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    code = Column(String(32), nullable=False)

    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)
    faculty_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    time_slot_id = Column(Integer, ForeignKey("time_slots.id", ondelete="SET NULL"), nullable=True)

    # time-of-day only, date component is never stored
    day = Column(Enum(Day, name="day_of_week"), nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    course = relationship("Course", back_populates="sections")
    room = relationship("Room", back_populates="sections")
    faculty = relationship("User", back_populates="sections")
    time_slot = relationship("TimeSlot")
    schedules = relationship("StudentSchedule", back_populates="section", cascade="all, delete-orphan")
    tests = relationship("Test", back_populates="section", cascade="all, delete-orphan", order_by="Test.id")
