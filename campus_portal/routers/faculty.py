import secrets

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from io import BytesIO
from sqlalchemy.orm import Session
from sqlalchemy import func

from campus_portal.database import get_db
from campus_portal.utils.auth import require_faculty
from campus_portal.utils.excel_export import rows_to_xlsx_bytes, make_filename

from campus_portal.models.enrollment_test import EnrollmentTest
from campus_portal.models.quiz import Test, Question
from campus_portal.models.section import Section
from campus_portal.models.student_schedule import StudentSchedule
from campus_portal.models.user import User

from campus_portal.schemas.section import SectionWithCountOut
from campus_portal.schemas.quiz import (
    TestCreateIn, TestOut, TestDetailOut,
    QuestionIn, QuestionOut,
    ScoreRowOut, FacultyTestsOut,
)
from campus_portal.schemas.user import UserBrief

import logging
logger = logging.getLogger("campus_portal.faculty")


router = APIRouter(prefix="/faculty", tags=["Faculty"])


def _new_slug(db: Session) -> str:
    while True:
        slug = secrets.token_urlsafe(12).lower().replace("_", "").replace("-", "")[:16]
        if not db.query(Test.id).filter(Test.slug == slug).first():
            return slug


def _own_test(db: Session, slug: str, faculty: User) -> Test:
    test = (
        db.query(Test)
        .join(Section, Section.id == Test.section_id)
        .filter(Test.slug == slug, Section.faculty_id == faculty.id)
        .first()
    )
    if not test:
        raise HTTPException(status_code=404, detail="Test not found")
    return test


def _score_rows(db: Session, test: Test):
    rows = (
        db.query(EnrollmentTest, User)
        .join(StudentSchedule, StudentSchedule.id == EnrollmentTest.enrollment_id)
        .join(User, User.id == StudentSchedule.student_id)
        .filter(EnrollmentTest.test_id == test.id)
        .order_by(User.name.asc())
        .all()
    )
    total = len(test.questions)
    return [
        ScoreRowOut(
            enrollment_test_id=et.id,
            student=UserBrief.model_validate(u),
            score=et.score,
            total=total,
            attempts=et.attempts,
            status=et.status,
        )
        for et, u in rows
    ]


@router.get("/sections", response_model=list[SectionWithCountOut])
def faculty_list_sections(db: Session = Depends(get_db), faculty=Depends(require_faculty)):
    sections = db.query(Section).filter(Section.faculty_id == faculty.id).all()

    counts = dict(
        db.query(StudentSchedule.section_id, func.count(StudentSchedule.id))
        .filter(StudentSchedule.section_id.in_([s.id for s in sections]))
        .group_by(StudentSchedule.section_id)
        .all()
    ) if sections else {}

    out = []
    for s in sorted(sections, key=lambda x: (x.day.weekday, x.start_time)):
        item = SectionWithCountOut.model_validate(s)
        out.append(item.model_copy(update={"enrolled_count": counts.get(s.id, 0)}))
    return out


@router.get("/tests", response_model=list[FacultyTestsOut])
def faculty_list_tests(db: Session = Depends(get_db), faculty=Depends(require_faculty)):
    sections = (
        db.query(Section)
        .filter(Section.faculty_id == faculty.id)
        .order_by(Section.id.asc())
        .all()
    )
    return [
        FacultyTestsOut(
            section_id=s.id,
            section_name=s.name,
            section_code=s.code,
            course_name=s.course.name,
            tests=[TestOut.model_validate(t) for t in s.tests],
        )
        for s in sections
    ]


@router.post("/tests", response_model=TestOut, status_code=201)
def faculty_create_test(
    body: TestCreateIn,
    db: Session = Depends(get_db),
    faculty=Depends(require_faculty),
):
    section = (
        db.query(Section)
        .filter(Section.id == body.section_id, Section.faculty_id == faculty.id)
        .first()
    )
    if not section:
        raise HTTPException(status_code=404, detail="Section not found")

    test = Test(
        section_id=section.id,
        name=body.name.strip(),
        description=body.description.strip(),
        max_attempts=body.max_attempts,
        slug=_new_slug(db),
    )
    db.add(test)
    db.commit()
    db.refresh(test)
    logger.info("faculty %s created test %s (%s) for section %s", faculty.id, test.id, test.slug, section.id)
    return TestOut.model_validate(test)


@router.get("/tests/{slug}", response_model=TestDetailOut)
def faculty_get_test(slug: str, db: Session = Depends(get_db), faculty=Depends(require_faculty)):
    test = _own_test(db, slug, faculty)
    base = TestDetailOut.model_validate(test)
    return base.model_copy(update={"student_count": len(test.students)})


@router.post("/tests/{slug}/questions", response_model=QuestionOut, status_code=201)
def faculty_add_question(
    slug: str,
    body: QuestionIn,
    db: Session = Depends(get_db),
    faculty=Depends(require_faculty),
):
    test = _own_test(db, slug, faculty)

    q = Question(
        test_id=test.id,
        question=body.question.strip(),
        options=body.options,
        answer=body.answer,
    )
    db.add(q)
    db.commit()
    db.refresh(q)
    return QuestionOut.model_validate(q)


@router.get("/scores/{slug}", response_model=list[ScoreRowOut])
def faculty_test_scores(slug: str, db: Session = Depends(get_db), faculty=Depends(require_faculty)):
    test = _own_test(db, slug, faculty)
    return _score_rows(db, test)


@router.get("/scores/{slug}/export")
def faculty_export_scores(slug: str, db: Session = Depends(get_db), faculty=Depends(require_faculty)):
    test = _own_test(db, slug, faculty)
    rows = [
        {
            "Student": r.student.name,
            "Email": r.student.email,
            "Score": r.score,
            "Out of": r.total,
            "Attempts": r.attempts,
            "Status": r.status.value,
        }
        for r in _score_rows(db, test)
    ]

    content = rows_to_xlsx_bytes(rows, sheet_name=test.name)
    filename = make_filename(f"scores_{test.slug}")
    return StreamingResponse(
        BytesIO(content),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
