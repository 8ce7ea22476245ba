from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from .config import settings
from .calculators import registry
from .calculators.material_lookup import LIBRARY_VERSION
from .routers import calculators

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("calc_engine")

app = FastAPI(
    title=settings.APP_NAME,
    description="Validation and estimation engine for laser cutting calculators",
    version=settings.ENGINE_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(calculators.router, prefix="/api")


@app.get("/health")
def health():
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "engine_version": settings.ENGINE_VERSION,
        "library_version": LIBRARY_VERSION,
        "calculators": len(registry.list_calculators()),
    }


@app.on_event("startup")
def check_calculators():
    """Log any calculator whose bundled inputs no longer validate."""
    report = registry.self_check()
    broken = [calc_id for calc_id, ok in report.items() if not ok]
    if broken:
        logger.error("Calculators with invalid example/default inputs: %s", ", ".join(broken))
    else:
        logger.info("%d calculators ready", len(report))
