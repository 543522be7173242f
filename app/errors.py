from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.logging import get_logger
from app.schemas.common import SearchErrorResponse
from app.services.search_contract import SearchValidationError

logger = get_logger(__name__)


async def _search_validation_handler(request: Request, exc: SearchValidationError) -> JSONResponse:
    logger.info("Rejected search on %s: %s", request.url.path, exc)
    body = SearchErrorResponse(detail=exc.message, field=exc.field)
    return JSONResponse(status_code=400, content=body.model_dump())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SearchValidationError, _search_validation_handler)
