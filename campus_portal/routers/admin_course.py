from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from campus_portal.database import get_db
from campus_portal.utils.auth import require_admin

from campus_portal.models.course import Course
from campus_portal.models.section import Section

from campus_portal.schemas.course import CourseIn, CourseUpdate, CourseOut

import logging
logger = logging.getLogger("campus_portal.admin")


router = APIRouter(prefix="/admin/courses", tags=["Admin - Courses"])


@router.get("", response_model=list[CourseOut])
def admin_list_courses(
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
    keyword: Optional[str] = Query(None, description="name or code"),
):
    q = db.query(Course)
    if keyword:
        like = f"%{keyword.strip()}%"
        q = q.filter(or_(Course.name.ilike(like), Course.code.ilike(like)))
    return [CourseOut.model_validate(c) for c in q.order_by(Course.code.asc()).all()]


@router.get("/{course_id}", response_model=CourseOut)
def admin_get_course(course_id: int, db: Session = Depends(get_db), admin=Depends(require_admin)):
    c = db.query(Course).filter(Course.id == course_id).first()
    if not c:
        raise HTTPException(status_code=404, detail="Course not found")
    return CourseOut.model_validate(c)


@router.post("", response_model=CourseOut, status_code=201)
def admin_create_course(
    body: CourseIn,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    if db.query(Course.id).filter(Course.code == body.code).first():
        raise HTTPException(status_code=400, detail="Course code already exists")

    c = Course(name=body.name.strip(), code=body.code)
    db.add(c)
    db.commit()
    db.refresh(c)
    logger.info("course %s (%s) created", c.id, c.code)
    return CourseOut.model_validate(c)


@router.put("/{course_id}", response_model=CourseOut)
def admin_update_course(
    course_id: int,
    body: CourseUpdate,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    c = db.query(Course).filter(Course.id == course_id).first()
    if not c:
        raise HTTPException(status_code=404, detail="Course not found")

    data = body.model_dump(exclude_unset=True)
    if data.get("code") and data["code"] != c.code:
        if db.query(Course.id).filter(Course.code == data["code"], Course.id != course_id).first():
            raise HTTPException(status_code=400, detail="Course code already exists")

    for k, v in data.items():
        if v is not None:
            setattr(c, k, v)

    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e.orig))

    db.refresh(c)
    return CourseOut.model_validate(c)


@router.delete("/{course_id}")
def admin_delete_course(
    course_id: int,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    c = db.query(Course).filter(Course.id == course_id).first()
    if not c:
        raise HTTPException(status_code=404, detail="Course not found")

    if db.query(Section.id).filter(Section.course_id == course_id).first():
        raise HTTPException(status_code=409, detail="Course still has sections")

    db.delete(c)
    db.commit()
    return {"detail": "deleted"}
