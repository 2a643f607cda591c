from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_portal.database import get_db
from campus_portal.utils.auth import require_admin

from campus_portal.models.course import Course
from campus_portal.models.enums import Day, UserRole
from campus_portal.models.room import Room
from campus_portal.models.section import Section
from campus_portal.models.time_slot import TimeSlot
from campus_portal.models.user import User

from campus_portal.schemas.section import (
    SectionIn, SectionCheckIn, SectionOut, ConflictCheckOut,
)
from campus_portal.utils.conflict import SectionSlot, find_conflict
from campus_portal.utils.times import format_time

import logging
logger = logging.getLogger("campus_portal.admin")


router = APIRouter(prefix="/admin/sections", tags=["Admin - Sections"])


def _sort_key(s: Section):
    return (s.day.weekday, s.start_time, s.code)


def _resolve_time(db: Session, body):
    """
    (day, start, end, time_slot_id) for the submitted form.
    A picked time slot overrides any day/start/end sent alongside it.
    """
    if body.time_slot_id is not None:
        slot = db.query(TimeSlot).filter(TimeSlot.id == body.time_slot_id).first()
        if not slot:
            raise HTTPException(status_code=400, detail="time_slot_id not found")
        return slot.day, slot.start_time, slot.end_time, slot.id
    return body.day, body.start_time, body.end_time, None


def _lock_room_and_faculty(db: Session, room_id: int, faculty_id: int):
    """
    Row-lock the room and the faculty user so two requests booking either of
    them run check-then-write one after the other. No-op on sqlite.
    """
    room = db.query(Room).filter(Room.id == room_id).with_for_update().first()
    if not room:
        raise HTTPException(status_code=400, detail="room_id not found")

    faculty = db.query(User).filter(User.id == faculty_id).with_for_update().first()
    if not faculty or faculty.role != UserRole.FACULTY:
        raise HTTPException(status_code=400, detail="faculty_id is not a faculty member")

    return room, faculty


def _existing_for(db: Session, day, room_id: Optional[int], faculty_id: Optional[int]):
    conds = []
    if room_id is not None:
        conds.append(Section.room_id == room_id)
    if faculty_id is not None:
        conds.append(Section.faculty_id == faculty_id)
    if not conds:
        return []
    return db.query(Section).filter(Section.day == day, or_(*conds)).all()


def _raise_if_conflict(db: Session, candidate: SectionSlot):
    existing = _existing_for(db, candidate.day, candidate.room_id, candidate.faculty_id)
    result = find_conflict(candidate, existing)
    if result.has_conflict:
        logger.warning(
            "section conflict %s: day=%s %s-%s room=%s faculty=%s clashes with section %s",
            result.reason.value, candidate.day, candidate.start_time, candidate.end_time,
            candidate.room_id, candidate.faculty_id, result.section_id,
        )
        raise HTTPException(
            status_code=409,
            detail={
                "message": result.message,
                "reason": result.reason.value,
                "section_id": result.section_id,
            },
        )


@router.get("", response_model=list[SectionOut])
def admin_list_sections(
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
    day: Optional[Day] = Query(None),
    faculty_id: Optional[int] = Query(None),
    room_id: Optional[int] = Query(None),
    course_id: Optional[int] = Query(None),
):
    q = db.query(Section)
    if day is not None:
        q = q.filter(Section.day == day)
    if faculty_id is not None:
        q = q.filter(Section.faculty_id == faculty_id)
    if room_id is not None:
        q = q.filter(Section.room_id == room_id)
    if course_id is not None:
        q = q.filter(Section.course_id == course_id)

    return [SectionOut.model_validate(s) for s in sorted(q.all(), key=_sort_key)]


# dry run for the section form: same rules as save, nothing written
@router.post("/check", response_model=ConflictCheckOut)
def admin_check_section(
    body: SectionCheckIn,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    day, start, end, _ = _resolve_time(db, body)
    candidate = SectionSlot(
        id=body.section_id,
        day=day,
        start_time=start,
        end_time=end,
        room_id=body.room_id,
        faculty_id=body.faculty_id,
    )
    existing = _existing_for(db, day, body.room_id, body.faculty_id)
    result = find_conflict(candidate, existing)
    return ConflictCheckOut(
        reason=result.reason,
        has_conflict=result.has_conflict,
        message=result.message,
        section_id=result.section_id,
    )


@router.get("/{section_id}", response_model=SectionOut)
def admin_get_section(section_id: int, db: Session = Depends(get_db), admin=Depends(require_admin)):
    s = db.query(Section).filter(Section.id == section_id).first()
    if not s:
        raise HTTPException(status_code=404, detail="Section not found")
    return SectionOut.model_validate(s)


@router.post("", response_model=SectionOut, status_code=201)
def admin_create_section(
    body: SectionIn,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    if not db.query(Course.id).filter(Course.id == body.course_id).first():
        raise HTTPException(status_code=400, detail="course_id not found")
    _lock_room_and_faculty(db, body.room_id, body.faculty_id)

    day, start, end, slot_id = _resolve_time(db, body)
    _raise_if_conflict(db, SectionSlot(
        day=day, start_time=start, end_time=end,
        room_id=body.room_id, faculty_id=body.faculty_id,
    ))

    s = Section(
        name=body.name.strip(),
        code=body.code.strip(),
        course_id=body.course_id,
        room_id=body.room_id,
        faculty_id=body.faculty_id,
        time_slot_id=slot_id,
        day=day,
        start_time=start,
        end_time=end,
    )
    db.add(s)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e.orig))

    db.refresh(s)
    logger.info(
        "section %s created (%s %s-%s room=%s faculty=%s)",
        s.id, day.value, format_time(start), format_time(end), s.room_id, s.faculty_id,
    )
    return SectionOut.model_validate(s)


@router.put("/{section_id}", response_model=SectionOut)
def admin_update_section(
    section_id: int,
    body: SectionIn,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    s = db.query(Section).filter(Section.id == section_id).first()
    if not s:
        raise HTTPException(status_code=404, detail="Section not found")

    if not db.query(Course.id).filter(Course.id == body.course_id).first():
        raise HTTPException(status_code=400, detail="course_id not found")
    _lock_room_and_faculty(db, body.room_id, body.faculty_id)

    day, start, end, slot_id = _resolve_time(db, body)
    # own id excluded, so re-saving unchanged times is fine
    _raise_if_conflict(db, SectionSlot(
        id=s.id, day=day, start_time=start, end_time=end,
        room_id=body.room_id, faculty_id=body.faculty_id,
    ))

    s.name = body.name.strip()
    s.code = body.code.strip()
    s.course_id = body.course_id
    s.room_id = body.room_id
    s.faculty_id = body.faculty_id
    s.time_slot_id = slot_id
    s.day = day
    s.start_time = start
    s.end_time = end

    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e.orig))

    db.refresh(s)
    logger.info("section %s updated", s.id)
    return SectionOut.model_validate(s)


@router.delete("/{section_id}")
def admin_delete_section(
    section_id: int,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    s = db.query(Section).filter(Section.id == section_id).first()
    if not s:
        raise HTTPException(status_code=404, detail="Section not found")

    # enrollments, tests and their results go with it
    db.delete(s)
    db.commit()
    logger.info("section %s deleted", section_id)
    return {"detail": "deleted"}
