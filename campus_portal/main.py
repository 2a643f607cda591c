from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from campus_portal.config import settings
from campus_portal.database import Base, engine
from campus_portal.routers import auth, admin, admin_course, admin_room, admin_section, faculty, student

# every mapped table has to be registered before create_all
from campus_portal.models import (  # noqa: F401
    user, course, room, time_slot, section, student_schedule, quiz, enrollment_test,
)

import time
import logging
from fastapi import Request
from campus_portal.logging_config import setup_logging


setup_logging()
logger = logging.getLogger("campus_portal")


# create tables if missing
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Campus Portal", version="1.0.0")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    try:
        response = await call_next(request)
        ms = int((time.time() - start) * 1000)
        logger.info("%s %s -> %s (%dms)", request.method, request.url.path, response.status_code, ms)
        return response
    except Exception:
        ms = int((time.time() - start) * 1000)
        logger.exception("Unhandled error %s %s (%dms)", request.method, request.url.path, ms)
        raise


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Flatten pydantic errors into {field: message} so forms can show them inline."""
    field_errors = {}
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        field = ".".join(loc) if loc else "form"
        msg = err.get("msg", "Invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        field_errors.setdefault(field, msg)

    logger.info("validation error %s %s: %s", request.method, request.url.path, field_errors)
    return JSONResponse(
        status_code=422,
        content={"detail": "Validation error", "field_errors": field_errors},
    )


# Routers
app.include_router(auth.router)
app.include_router(admin_course.router)
app.include_router(admin_room.router)
app.include_router(admin_section.router)
app.include_router(admin.router)
app.include_router(faculty.router)
app.include_router(student.router)


@app.get("/")
def root():
    return {"message": "Campus portal is running!"}
