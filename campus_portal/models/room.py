from sqlalchemy import Column, Integer, String, CheckConstraint
from sqlalchemy.orm import relationship
from campus_portal.database import Base

class Room(Base):
    __tablename__ = "rooms"
    __table_args__ = (
        CheckConstraint("max_capacity >= 1", name="ck_rooms_max_capacity"),
    )

    id = Column(Integer, primary_key=True, index=True)
    no = Column(String(50), unique=True, nullable=False)
    max_capacity = Column(Integer, nullable=False)

    sections = relationship("Section", back_populates="room")
