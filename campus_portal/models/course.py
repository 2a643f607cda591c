
from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from campus_portal.database import Base

class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    code = Column(String(32), unique=True, nullable=False, index=True)

    # relationship
    sections = relationship("Section", back_populates="course")
