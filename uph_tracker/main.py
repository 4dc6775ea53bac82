import importlib
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .deps import engine
from .logging_config import setup_logging
from . import models

setup_logging(settings.log_level, settings.log_json)
logger = logging.getLogger(__name__)

app = FastAPI(title="UPH Tracker API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
)

@app.get("/health")
def health():
    return {"ok": True}

ROUTERS = ["targets", "worklogs", "metrics", "transfer", "audit"]

def _include_routers() -> None:
    for modname in ROUTERS:
        mod = importlib.import_module(f"{__package__}.routers.{modname}")
        app.include_router(mod.router)
        logger.info("[routers] mounted %s", modname)

@app.on_event("startup")
def _on_startup():
    models.Base.metadata.create_all(bind=engine)
    if settings.scheduler_enabled:
        from .jobs import start_scheduler
        start_scheduler()

@app.on_event("shutdown")
def _on_shutdown():
    if settings.scheduler_enabled:
        from .jobs import stop_scheduler
        stop_scheduler()

# Include routers immediately (not in startup event)
_include_routers()
