from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from campus_portal.database import get_db
from campus_portal.utils.auth import require_admin

from campus_portal.models.room import Room
from campus_portal.models.section import Section
from campus_portal.models.time_slot import TimeSlot

from campus_portal.schemas.room import RoomIn, RoomUpdate, RoomOut
from campus_portal.schemas.time_slot import TimeSlotIn, TimeSlotOut

import logging
logger = logging.getLogger("campus_portal.admin")


router = APIRouter(prefix="/admin", tags=["Admin - Rooms"])


# ---------- rooms ----------

@router.get("/rooms", response_model=list[RoomOut])
def admin_list_rooms(db: Session = Depends(get_db), admin=Depends(require_admin)):
    return db.query(Room).order_by(Room.no.asc()).all()


@router.get("/rooms/{room_id}", response_model=RoomOut)
def admin_get_room(room_id: int, db: Session = Depends(get_db), admin=Depends(require_admin)):
    r = db.query(Room).filter(Room.id == room_id).first()
    if not r:
        raise HTTPException(status_code=404, detail="Room not found")
    return r


@router.post("/rooms", response_model=RoomOut, status_code=201)
def admin_create_room(body: RoomIn, db: Session = Depends(get_db), admin=Depends(require_admin)):
    no = body.no.strip()
    if db.query(Room.id).filter(Room.no == no).first():
        raise HTTPException(status_code=400, detail="Room already exists")

    r = Room(no=no, max_capacity=body.max_capacity)
    db.add(r)
    db.commit()
    db.refresh(r)
    logger.info("room %s (%s, cap %s) created", r.id, r.no, r.max_capacity)
    return r


@router.put("/rooms/{room_id}", response_model=RoomOut)
def admin_update_room(
    room_id: int,
    body: RoomUpdate,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    r = db.query(Room).filter(Room.id == room_id).first()
    if not r:
        raise HTTPException(status_code=404, detail="Room not found")

    data = body.model_dump(exclude_unset=True)
    if data.get("no"):
        data["no"] = data["no"].strip()
        if db.query(Room.id).filter(Room.no == data["no"], Room.id != room_id).first():
            raise HTTPException(status_code=400, detail="Room already exists")

    for k, v in data.items():
        if v is not None:
            setattr(r, k, v)

    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e.orig))

    db.refresh(r)
    return r


@router.delete("/rooms/{room_id}")
def admin_delete_room(room_id: int, db: Session = Depends(get_db), admin=Depends(require_admin)):
    r = db.query(Room).filter(Room.id == room_id).first()
    if not r:
        raise HTTPException(status_code=404, detail="Room not found")

    if db.query(Section.id).filter(Section.room_id == room_id).first():
        raise HTTPException(status_code=409, detail="Room is still used by sections")

    db.delete(r)
    db.commit()
    return {"detail": "deleted"}


# ---------- time slots ----------

@router.get("/time-slots", response_model=list[TimeSlotOut])
def admin_list_time_slots(db: Session = Depends(get_db), admin=Depends(require_admin)):
    slots = db.query(TimeSlot).all()
    return sorted(slots, key=lambda t: (t.day.weekday, t.start_time))


@router.post("/time-slots", response_model=TimeSlotOut, status_code=201)
def admin_create_time_slot(body: TimeSlotIn, db: Session = Depends(get_db), admin=Depends(require_admin)):
    t = TimeSlot(
        label=body.label.strip(),
        day=body.day,
        start_time=body.start_time,
        end_time=body.end_time,
    )
    db.add(t)
    db.commit()
    db.refresh(t)
    return t


@router.delete("/time-slots/{slot_id}")
def admin_delete_time_slot(slot_id: int, db: Session = Depends(get_db), admin=Depends(require_admin)):
    t = db.query(TimeSlot).filter(TimeSlot.id == slot_id).first()
    if not t:
        raise HTTPException(status_code=404, detail="Time slot not found")

    # sections keep their own day/times
    db.query(Section).filter(Section.time_slot_id == slot_id).update(
        {Section.time_slot_id: None}, synchronize_session=False
    )
    db.delete(t)
    db.commit()
    return {"detail": "deleted"}
