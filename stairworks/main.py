from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from .config import settings
from .database import engine, Base, SessionLocal
from .calculators.stair_geometry import StairInputError
from .routers import stairs, task_templates

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("stairworks")

# Create tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title=settings.APP_NAME,
    description="Materials and labour estimates for slab-clad masonry stairs",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(stairs.router, prefix="/api")
app.include_router(task_templates.router, prefix="/api")


@app.exception_handler(StairInputError)
def stair_input_error(request: Request, exc: StairInputError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.get("/health")
def health():
    return {"status": "ok", "app": "stairworks"}


@app.on_event("startup")
def auto_seed():
    """Auto-seed the duration catalogue on first run."""
    if not settings.SEED_TASK_TEMPLATES:
        return
    db = SessionLocal()
    try:
        seeded = task_templates.seed_defaults(db)
        if seeded:
            logger.info("Seeded %d task templates", seeded)
    finally:
        db.close()
