"""
Reset the database to a small demo data set.

    python -m campus_portal.seed
"""
from datetime import time
import logging

from campus_portal.database import Base, SessionLocal, engine
from campus_portal.logging_config import setup_logging
from campus_portal.utils.hashing import hash_password

from campus_portal.models.course import Course
from campus_portal.models.enrollment_test import EnrollmentTest
from campus_portal.models.enums import Day, UserRole
from campus_portal.models.quiz import Test, Question
from campus_portal.models.room import Room
from campus_portal.models.section import Section
from campus_portal.models.student_schedule import StudentSchedule
from campus_portal.models.time_slot import TimeSlot
from campus_portal.models.user import User

logger = logging.getLogger("campus_portal.seed")

DEMO_PASSWORD = "password"


def seed(db):
    # children first
    for model in (EnrollmentTest, Question, Test, StudentSchedule, Section, TimeSlot, Course, Room, User):
        db.query(model).delete()

    admin = User(name="Admin", email="admin@app.com", password_hash=hash_password(DEMO_PASSWORD), role=UserRole.ADMIN)
    faculty = User(name="Faculty", email="faculty@app.com", password_hash=hash_password(DEMO_PASSWORD), role=UserRole.FACULTY)
    student = User(name="Student", email="student@app.com", password_hash=hash_password(DEMO_PASSWORD), role=UserRole.STUDENT)
    room = Room(no="B-12", max_capacity=30)
    course = Course(name="Math", code="MATH-101")
    db.add_all([admin, faculty, student, room, course])
    db.flush()

    section = Section(
        name="A",
        code="A",
        course_id=course.id,
        room_id=room.id,
        faculty_id=faculty.id,
        day=Day.MONDAY,
        start_time=time(9, 0),
        end_time=time(10, 45),
    )
    db.add(section)
    db.flush()

    db.add(StudentSchedule(student_id=student.id, section_id=section.id))
    db.commit()
    logger.info("Database has been seeded (%s users, section %s)", 3, section.id)


def main():
    setup_logging()
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed(db)
    except Exception:
        db.rollback()
        logger.exception("seeding failed")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
