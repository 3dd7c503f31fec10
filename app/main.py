import logging
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

# Import all models to ensure they're registered with SQLAlchemy Base
from . import (
    models,  # noqa: F401
    models_pdc,  # noqa: F401
)
from .config import BACKGROUND_TASKS_ENABLED
from .database import Base, engine, get_db
from .domain.appointments.router import router as appointments_router
from .domain.availability.repository import TimeslotRepository
from .domain.availability.router import router as availability_router
from .domain.pdc.router import router as pdc_router
from .models import DomainEvent
from .routes.notifications import router as notifications_router
from .services.event_dispatcher import count_events
from .services.scheduler import default_tasks

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    tasks = []
    if BACKGROUND_TASKS_ENABLED:
        tasks = default_tasks()
        for task in tasks:
            task.start()
    else:
        logger.info("Background tasks disabled - expecting a separate worker to run sweeps")
    app.state.periodic_tasks = tasks

    yield

    logger.info("Application shutting down...")
    for task in tasks:
        await task.stop()


app = FastAPI(title="GianConstruct Back Office API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may hold the raised ValueError, which is not JSON serializable
    return [
        {key: value for key, value in error.items() if key != "ctx"} for error in exc.errors()
    ]


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


# CORS Configuration
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:3000,http://localhost:5173",
).split(",")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(appointments_router)
app.include_router(availability_router)
app.include_router(pdc_router)
app.include_router(notifications_router)


@app.get("/")
def root():
    return {"message": "GianConstruct Back Office API is running"}


@app.get("/health")
def health(db: Session = Depends(get_db)):
    return {
        "status": "healthy",
        "backgroundTasks": [
            {"name": task.name, "running": task.running, "runs": task.runs}
            for task in getattr(app.state, "periodic_tasks", [])
        ],
        "pendingEvents": count_events(db, DomainEvent.STATUS_PENDING),
        "availableTimeslots": TimeslotRepository.count(db, is_available=True),
    }
