import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from timetable.api.routers import schedule
from timetable.core.config import settings
from timetable.core.database import init_db
from timetable.core.exceptions import TimetableError
from timetable.core.logging_config import RequestIdMiddleware, setup_logging
from timetable.core.monitoring import MetricsMiddleware, get_dashboard_stats, get_metrics

setup_logging(
    level=settings.log_level,
    to_file=settings.log_to_file,
    file_path=settings.log_file_path,
    max_bytes=settings.log_max_bytes,
    backup_count=settings.log_backup_count,
)
logger = logging.getLogger(__name__)

tags_metadata = [
    {"name": "schedule", "description": "Weekly schedules: conflict-checked writes, typical week and calendar views"},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Timetable API started")
    yield


app = FastAPI(
    title="Timetable API",
    description="Weekly university timetable with week parity, conflict checks and one-date overrides",
    openapi_tags=tags_metadata,
    root_path=settings.api_root_path,
    docs_url="/admin/docs",
    redoc_url="/admin/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestIdMiddleware)
app.add_middleware(MetricsMiddleware)

app.include_router(schedule.router)


@app.exception_handler(TimetableError)
async def timetable_error_handler(request: Request, exc: TimetableError):
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/")
async def root():
    return {"message": "Welcome to the Timetable API"}


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(content=get_metrics())


@app.get("/stats")
async def stats():
    """Dashboard-friendly statistics endpoint."""
    return get_dashboard_stats()
