from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from campus_portal.database import get_db
from campus_portal.utils.auth import require_student
from campus_portal.utils.conflict import find_schedule_clash

from campus_portal.models.enrollment_test import EnrollmentTest
from campus_portal.models.enums import TestStatus
from campus_portal.models.quiz import Test
from campus_portal.models.section import Section
from campus_portal.models.student_schedule import StudentSchedule

from campus_portal.schemas.schedule import (
    EnrollIn, ScheduleOut, ScheduleWithTestsOut, SectionBrowseOut, ClassDetailOut, TestBrief,
)
from campus_portal.schemas.section import SectionOut
from campus_portal.schemas.quiz import (
    StartTestOut, TestPublicOut, EnrollmentTestOut, SubmitQuizIn, SubmitQuizOut,
)

import logging
logger = logging.getLogger("campus_portal.student")


router = APIRouter(prefix="/student", tags=["Student"])


def _own_schedule_for_section(db: Session, student_id: int, section_id: int):
    return (
        db.query(StudentSchedule)
        .filter(StudentSchedule.student_id == student_id, StudentSchedule.section_id == section_id)
        .first()
    )


@router.get("/schedules", response_model=list[ScheduleWithTestsOut])
def my_schedules(db: Session = Depends(get_db), user=Depends(require_student)):
    rows = (
        db.query(StudentSchedule)
        .filter(StudentSchedule.student_id == user.id)
        .all()
    )
    rows.sort(key=lambda r: (r.section.day.weekday, r.section.start_time))

    out = []
    for r in rows:
        item = ScheduleWithTestsOut.model_validate(r)
        out.append(item.model_copy(update={
            "section_tests": [TestBrief.model_validate(t) for t in r.section.tests],
        }))
    return out


# join-classes listing
@router.get("/sections", response_model=list[SectionBrowseOut])
def browse_sections(db: Session = Depends(get_db), user=Depends(require_student)):
    sections = db.query(Section).all()

    counts = dict(
        db.query(StudentSchedule.section_id, func.count(StudentSchedule.id))
        .group_by(StudentSchedule.section_id)
        .all()
    )
    mine = {
        section_id: schedule_id
        for schedule_id, section_id in db.query(StudentSchedule.id, StudentSchedule.section_id)
        .filter(StudentSchedule.student_id == user.id)
        .all()
    }

    out = []
    for s in sorted(sections, key=lambda x: (x.course.code, x.code)):
        item = SectionBrowseOut.model_validate(s)
        out.append(item.model_copy(update={
            "enrolled_count": counts.get(s.id, 0),
            "is_enrolled": s.id in mine,
            "schedule_id": mine.get(s.id),
        }))
    return out


@router.post("/schedules", response_model=ScheduleOut, status_code=201)
def enroll(body: EnrollIn, db: Session = Depends(get_db), user=Depends(require_student)):
    # lock the section so concurrent enrollments see each other's seat
    section = (
        db.query(Section)
        .filter(Section.id == body.section_id)
        .with_for_update()
        .first()
    )
    if not section:
        raise HTTPException(status_code=404, detail="Section not found")

    if _own_schedule_for_section(db, user.id, section.id):
        raise HTTPException(status_code=400, detail="Already enrolled in this section")

    taken = db.query(func.count(StudentSchedule.id)).filter(StudentSchedule.section_id == section.id).scalar()
    if taken >= section.room.max_capacity:
        raise HTTPException(status_code=400, detail="Section is full")

    enrolled = (
        db.query(Section)
        .join(StudentSchedule, StudentSchedule.section_id == Section.id)
        .filter(StudentSchedule.student_id == user.id, Section.day == section.day)
        .all()
    )
    clash = find_schedule_clash(section, enrolled)
    if clash is not None:
        logger.info("student %s cannot join section %s: clashes with section %s", user.id, section.id, clash.id)
        raise HTTPException(
            status_code=409,
            detail={
                "message": "Time conflict",
                "section_id": section.id,
                "conflict_section_id": clash.id,
            },
        )

    row = StudentSchedule(student_id=user.id, section_id=section.id)
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Already enrolled in this section")

    db.refresh(row)
    logger.info("student %s enrolled in section %s", user.id, section.id)
    return ScheduleOut.model_validate(row)


@router.delete("/schedules/{schedule_id}")
def drop(schedule_id: int, db: Session = Depends(get_db), user=Depends(require_student)):
    row = (
        db.query(StudentSchedule)
        .filter(StudentSchedule.id == schedule_id, StudentSchedule.student_id == user.id)
        .first()
    )
    if not row:
        raise HTTPException(status_code=404, detail="Schedule not found")

    db.delete(row)
    db.commit()
    return {"success": True}


@router.get("/classes/{section_id}", response_model=ClassDetailOut)
def class_detail(section_id: int, db: Session = Depends(get_db), user=Depends(require_student)):
    section = db.query(Section).filter(Section.id == section_id).first()
    if not section:
        raise HTTPException(status_code=404, detail="Section not found")

    schedule = _own_schedule_for_section(db, user.id, section.id)
    if not schedule:
        raise HTTPException(status_code=403, detail="Not enrolled in this section")

    return ClassDetailOut(
        **SectionOut.model_validate(section).model_dump(),
        schedule_id=schedule.id,
        tests=[TestBrief.model_validate(t) for t in section.tests],
    )


@router.post("/classes/{section_id}/tests/{test_id}/start", response_model=StartTestOut)
def start_test(section_id: int, test_id: int, db: Session = Depends(get_db), user=Depends(require_student)):
    test = db.query(Test).filter(Test.id == test_id, Test.section_id == section_id).first()
    if not test:
        raise HTTPException(status_code=404, detail="Test not found")

    schedule = _own_schedule_for_section(db, user.id, section_id)
    if not schedule:
        raise HTTPException(status_code=403, detail="Not enrolled in this section")

    et = (
        db.query(EnrollmentTest)
        .filter(EnrollmentTest.enrollment_id == schedule.id, EnrollmentTest.test_id == test.id)
        .first()
    )
    if et is None:
        et = EnrollmentTest(
            enrollment_id=schedule.id,
            test_id=test.id,
            score=0,
            attempts=0,
            status=TestStatus.IN_PROGRESS,
        )
        db.add(et)
    else:
        if et.attempts >= test.max_attempts:
            raise HTTPException(status_code=400, detail="No attempts left")
        et.status = TestStatus.IN_PROGRESS

    db.commit()
    db.refresh(et)

    return StartTestOut(
        section_id=section_id,
        test=TestPublicOut.model_validate(test),
        enrollment_test=EnrollmentTestOut.model_validate(et),
    )


@router.post("/submit-quiz", response_model=SubmitQuizOut)
def submit_quiz(body: SubmitQuizIn, db: Session = Depends(get_db), user=Depends(require_student)):
    et = (
        db.query(EnrollmentTest)
        .join(StudentSchedule, StudentSchedule.id == EnrollmentTest.enrollment_id)
        .filter(EnrollmentTest.id == body.enrollment_test_id, StudentSchedule.student_id == user.id)
        .first()
    )
    if not et:
        raise HTTPException(status_code=404, detail="Enrollment test not found")
    if et.test_id != body.test_id:
        raise HTTPException(status_code=400, detail="test_id does not match the enrollment test")

    test = et.test
    if et.attempts >= test.max_attempts:
        raise HTTPException(status_code=400, detail="No attempts left")

    # answers[i] is for the i-th question, by question id
    questions = test.questions
    score = sum(1 for q, a in zip(questions, body.answers) if a is not None and a == q.answer)

    et.score = score
    et.attempts = et.attempts + 1
    et.status = TestStatus.ATTEMPTED
    db.commit()
    db.refresh(et)

    logger.info(
        "student %s submitted test %s: %s/%s (attempt %s)",
        user.id, test.id, score, len(questions), et.attempts,
    )
    return SubmitQuizOut(
        score=et.score,
        total=len(questions),
        attempts=et.attempts,
        status=et.status,
    )
