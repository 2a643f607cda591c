from typing import Optional

from fastapi import APIRouter, UploadFile, File, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from sqlalchemy import func

from campus_portal.database import get_db
from campus_portal.utils.auth import require_admin
from campus_portal.utils.hashing import hash_password
from campus_portal.utils.roster_import import read_roster_frame, parse_roster

from campus_portal.models.enums import UserRole
from campus_portal.models.section import Section
from campus_portal.models.student_schedule import StudentSchedule
from campus_portal.models.user import User

from campus_portal.schemas.admin_user import (
    AdminUserOut,
    AdminUserListOut,
    AdminUserCreateIn,
    AdminUserUpdateIn,
    RosterImportOut,
)
from campus_portal.schemas.schedule import ScheduleOut


import logging
logger = logging.getLogger("campus_portal.admin")


router = APIRouter(prefix="/admin", tags=["Admin"])

ALLOWED_ROSTER_EXT = (".xlsx", ".xls", ".csv")


def _to_out(u: User, section_count: int = 0, schedule_count: int = 0) -> AdminUserOut:
    return AdminUserOut(
        id=u.id,
        name=u.name,
        email=u.email,
        role=u.role,
        is_active=u.is_active,
        created_at=u.created_at,
        last_password_reset_at=u.last_password_reset_at,
        section_count=section_count,
        schedule_count=schedule_count,
    )


def _counts(db: Session, user_ids):
    if not user_ids:
        return {}, {}
    sec_rows = (
        db.query(Section.faculty_id, func.count(Section.id))
        .filter(Section.faculty_id.in_(user_ids))
        .group_by(Section.faculty_id)
        .all()
    )
    sch_rows = (
        db.query(StudentSchedule.student_id, func.count(StudentSchedule.id))
        .filter(StudentSchedule.student_id.in_(user_ids))
        .group_by(StudentSchedule.student_id)
        .all()
    )
    return dict(sec_rows), dict(sch_rows)


def _get_user(db: Session, user_id: int) -> User:
    u = db.query(User).filter(User.id == user_id).first()
    if not u:
        raise HTTPException(status_code=404, detail="User not found")
    return u


def _get_student(db: Session, student_id: int) -> User:
    u = _get_user(db, student_id)
    if u.role != UserRole.STUDENT:
        raise HTTPException(status_code=400, detail="User is not a student")
    return u


# ---------- roster import ----------

@router.post("/users/import", response_model=RosterImportOut)
def import_roster(
    file: UploadFile = File(...),
    role: UserRole = Query(UserRole.STUDENT, description="role for rows without a role column"),
    admin=Depends(require_admin),
    db: Session = Depends(get_db),
):
    filename = file.filename or ""
    if not filename.lower().endswith(ALLOWED_ROSTER_EXT):
        raise HTTPException(status_code=400, detail=f"Only {', '.join(ALLOWED_ROSTER_EXT)} files are allowed")

    try:
        df = read_roster_frame(file.file, filename)
    except Exception as e:
        logger.warning("unreadable roster %s: %s", filename, e)
        raise HTTPException(status_code=400, detail="Cannot read roster file")

    parsed = parse_roster(df, default_role=role)
    if not parsed.rows and parsed.errors:
        raise HTTPException(status_code=400, detail={"message": "No valid rows", "errors": parsed.errors})

    emails = [r.email for r in parsed.rows]
    existing = {e for (e,) in db.query(User.email).filter(User.email.in_(emails)).all()}

    inserted = 0
    skipped = 0
    errors = list(parsed.errors)
    try:
        for r in parsed.rows:
            if r.email in existing:
                skipped += 1
                continue
            db.add(User(
                name=r.name,
                email=r.email,
                password_hash=hash_password(r.password),
                role=r.role,
            ))
            inserted += 1
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("roster import %s: inserted=%s skipped=%s errors=%s", filename, inserted, skipped, len(errors))
    return RosterImportOut(inserted=inserted, skipped_existing=skipped, errors=errors)


# ---------- users ----------

@router.get("/users", response_model=AdminUserListOut)
def admin_list_users(
    db: Session = Depends(get_db),
    admin=Depends(require_admin),

    role: Optional[UserRole] = Query(None),
    name: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),

    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    q = db.query(User)

    if role is not None:
        q = q.filter(User.role == role)
    if name:
        q = q.filter(User.name.ilike(f"%{name}%"))
    if email:
        q = q.filter(User.email.ilike(f"%{email}%"))
    if is_active is not None:
        q = q.filter(User.is_active.is_(is_active))

    total = q.count()
    users = (
        q.order_by(User.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )

    sec_map, sch_map = _counts(db, [u.id for u in users])
    items = [_to_out(u, sec_map.get(u.id, 0), sch_map.get(u.id, 0)) for u in users]
    return AdminUserListOut(items=items, total=total, page=page, page_size=page_size)


@router.post("/users", response_model=AdminUserOut, status_code=201)
def admin_create_user(
    body: AdminUserCreateIn,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    email = body.email.strip().lower()
    if db.query(User.id).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="A user already exists with this email")

    u = User(
        name=body.name.strip(),
        email=email,
        password_hash=hash_password(body.password),
        role=body.role,
    )
    db.add(u)
    db.commit()
    db.refresh(u)
    logger.info("admin %s created %s user %s", admin.id, u.role.value, u.email)
    return _to_out(u)


@router.get("/users/{user_id}", response_model=AdminUserOut)
def admin_get_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    u = _get_user(db, user_id)
    sec_map, sch_map = _counts(db, [u.id])
    return _to_out(u, sec_map.get(u.id, 0), sch_map.get(u.id, 0))


@router.put("/users/{user_id}", response_model=AdminUserOut)
def admin_update_user(
    user_id: int,
    body: AdminUserUpdateIn,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    u = _get_user(db, user_id)
    data = body.model_dump(exclude_unset=True)

    if data.get("email") is not None:
        new_email = data["email"].strip().lower()
        exists = db.query(User.id).filter(User.email == new_email, User.id != u.id).first()
        if exists:
            raise HTTPException(status_code=409, detail="email already used")
        u.email = new_email

    if data.get("role") is not None and data["role"] != u.role:
        # users still teaching or enrolled keep their role
        if u.role == UserRole.FACULTY and db.query(Section.id).filter(Section.faculty_id == u.id).first():
            raise HTTPException(status_code=409, detail="Faculty still has sections")
        if u.role == UserRole.STUDENT and db.query(StudentSchedule.id).filter(StudentSchedule.student_id == u.id).first():
            raise HTTPException(status_code=409, detail="Student still has enrollments")
        u.role = data["role"]

    if data.get("name") is not None:
        u.name = data["name"].strip()
    if data.get("is_active") is not None:
        u.is_active = data["is_active"]

    db.commit()
    db.refresh(u)
    sec_map, sch_map = _counts(db, [u.id])
    return _to_out(u, sec_map.get(u.id, 0), sch_map.get(u.id, 0))


@router.delete("/users/{user_id}")
def admin_delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    u = _get_user(db, user_id)
    if u.id == admin.id:
        raise HTTPException(status_code=400, detail="Cannot delete yourself")
    if db.query(Section.id).filter(Section.faculty_id == u.id).first():
        raise HTTPException(status_code=409, detail="Faculty still has sections")

    db.delete(u)
    db.commit()
    return {"detail": "user deleted"}


# ---------- student schedules ----------

@router.get("/students/{student_id}/schedules", response_model=list[ScheduleOut])
def admin_list_student_schedules(
    student_id: int,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    _get_student(db, student_id)
    return (
        db.query(StudentSchedule)
        .filter(StudentSchedule.student_id == student_id)
        .order_by(StudentSchedule.id.asc())
        .all()
    )


@router.delete("/students/{student_id}/schedules/{schedule_id}")
def admin_drop_student_schedule(
    student_id: int,
    schedule_id: int,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    row = (
        db.query(StudentSchedule)
        .filter(StudentSchedule.id == schedule_id, StudentSchedule.student_id == student_id)
        .first()
    )
    if not row:
        raise HTTPException(status_code=404, detail="Schedule not found")

    section_id = row.section_id
    db.delete(row)
    db.commit()
    logger.info("admin %s dropped student %s from section %s", admin.id, student_id, section_id)
    return {"success": True}
