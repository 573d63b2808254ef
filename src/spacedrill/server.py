import logging
import time
from contextlib import asynccontextmanager
from datetime import date

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from spacedrill.application.config import AppConfig, resolve_config
from spacedrill.application.factory import get_item_store
from spacedrill.application.queue_builder import estimate_minutes
from spacedrill.application.review_service import ReviewService
from spacedrill.application.scheduler import apply_rating
from spacedrill.consts import VERSION
from spacedrill.domain.constants import DEFAULT_EASE_FACTOR, MAX_EASE_FACTOR, MIN_EASE_FACTOR
from spacedrill.domain.errors import InvalidOperation, ItemNotFound, StoreError
from spacedrill.domain.models import ItemState
from spacedrill.infrastructure.serialization import item_to_wire

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("spacedrill.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"spacedrill server v{VERSION} starting up...")
    yield
    # Shutdown
    logger.info("spacedrill server shutting down...")


app = FastAPI(
    title="spacedrill server",
    description="Scheduling, due queues and retention forecasts over HTTP.",
    version=VERSION,
    lifespan=lifespan,
)

start_time = time.time()


def get_config() -> AppConfig:
    return resolve_config()


def get_service(config: AppConfig = Depends(get_config)) -> ReviewService:
    return ReviewService(get_item_store(config))


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


class DueResponse(BaseModel):
    as_of: date
    count: int
    estimated_minutes: int
    items: list[dict]


@app.get("/due", response_model=DueResponse)
async def due_items(as_of: date | None = None, service: ReviewService = Depends(get_service)):
    """Ordered due queue: due items first, then new items."""
    day = as_of or date.today()
    try:
        queue = await service.due_queue(day)
    except StoreError as e:
        logger.error(f"Due queue failed: {e}")
        raise HTTPException(status_code=502, detail=str(e)) from e

    return DueResponse(
        as_of=day,
        count=len(queue),
        estimated_minutes=estimate_minutes(len(queue)),
        items=[item_to_wire(item) for item in queue],
    )


class PreviewRequest(BaseModel):
    ease_factor: float = Field(default=DEFAULT_EASE_FACTOR, ge=MIN_EASE_FACTOR, le=MAX_EASE_FACTOR)
    interval_days: int = Field(default=0, ge=0)
    rating: int
    today: date | None = None


class PreviewResponse(BaseModel):
    ease_factor: float
    interval_days: int
    next_review_date: date


@app.post("/schedule/preview", response_model=PreviewResponse)
async def schedule_preview(req: PreviewRequest):
    """Apply one rating to a scheduling state without persisting anything."""
    today = req.today or date.today()
    state = ItemState(req.ease_factor, req.interval_days, today)
    try:
        result = apply_rating(state, req.rating, today)
    except InvalidOperation as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    return PreviewResponse(
        ease_factor=result.ease_factor,
        interval_days=result.interval_days,
        next_review_date=result.next_review_date,
    )


class ProjectionRequest(BaseModel):
    from_date: date | None = None
    days: int | None = Field(default=None, ge=0)


class ProjectionPoint(BaseModel):
    date: date
    retention_pct: float


@app.post("/retention/projection", response_model=list[ProjectionPoint])
async def retention_projection(
    req: ProjectionRequest,
    config: AppConfig = Depends(get_config),
    service: ReviewService = Depends(get_service),
):
    """Mean retention curve assuming no further reviews."""
    days = config.projection_days if req.days is None else req.days
    try:
        points = await service.project_retention(req.from_date or date.today(), days)
    except StoreError as e:
        logger.error(f"Projection failed: {e}")
        raise HTTPException(status_code=502, detail=str(e)) from e

    return [ProjectionPoint(date=p.date, retention_pct=p.retention_pct) for p in points]


class LeechResponse(BaseModel):
    item: dict
    failures: int


@app.get("/leeches", response_model=list[LeechResponse])
async def list_leeches(
    threshold: int | None = Query(default=None, ge=1),
    config: AppConfig = Depends(get_config),
    service: ReviewService = Depends(get_service),
):
    if threshold is None:
        threshold = config.leech_threshold
    try:
        ranked = await service.leeches(threshold)
    except StoreError as e:
        logger.error(f"Leech lookup failed: {e}")
        raise HTTPException(status_code=502, detail=str(e)) from e
    return [LeechResponse(item=item_to_wire(item), failures=n) for item, n in ranked]


@app.post("/leeches/{item_id}/reset")
async def reset_leech(item_id: str, service: ReviewService = Depends(get_service)):
    try:
        item = await service.reset_leech(item_id, date.today())
    except ItemNotFound as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except StoreError as e:
        logger.error(f"Leech reset failed: {e}")
        raise HTTPException(status_code=502, detail=str(e)) from e
    return item_to_wire(item)
