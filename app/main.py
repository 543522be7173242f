from fastapi import FastAPI, Request
from starlette.responses import Response

from app.api.classes import router as classes_router
from app.api.exercises import router as exercises_router
from app.api.materials import router as materials_router
from app.api.professors import router as professors_router
from app.api.students import router as students_router
from app.config import settings
from app.db import get_engine
from app.errors import register_error_handlers
from app.logging import configure_logging, get_logger
from app.services.normalization_provider import NormalizationMode, provision_normalization

configure_logging()
logger = get_logger(__name__)

app = FastAPI(title="Academy Search API")
app.state.normalization_mode = NormalizationMode.unavailable
register_error_handlers(app)


def _include_api_router(router, dependencies=None):
    app.include_router(router, prefix="/api/v1", dependencies=dependencies)


_include_api_router(students_router)
_include_api_router(professors_router)
_include_api_router(classes_router)
_include_api_router(materials_router)
_include_api_router(exercises_router)


@app.get("/health")
def health_check(request: Request):
    return {"status": "ok", "normalization_mode": request.app.state.normalization_mode.value}


@app.head("/health")
def head_health():
    return Response(status_code=200)


@app.on_event("startup")
def _provision_normalization():
    if not settings.normalization_provisioning_enabled:
        logger.info("Normalization provisioning disabled; text search is case-insensitive only")
        app.state.normalization_mode = NormalizationMode.unavailable
        return
    app.state.normalization_mode = provision_normalization(get_engine())
