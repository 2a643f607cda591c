from sqlalchemy import Column, Integer, String, Time, Enum, CheckConstraint
from campus_portal.database import Base
from campus_portal.models.enums import Day

class TimeSlot(Base):
    __tablename__ = "time_slots"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_time_slots_interval"),
    )

    id = Column(Integer, primary_key=True, index=True)
    label = Column(String(50), nullable=False)
    day = Column(Enum(Day, name="day_of_week"), nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
