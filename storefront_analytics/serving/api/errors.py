"""
API Error Handlers

Maps analytics errors onto JSON responses:
- InvalidParameterError -> 400 with the offending parameter
- DataFetchError -> 500 with a generic message
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import structlog

from storefront_analytics.analytics.errors import DataFetchError, InvalidParameterError

logger = structlog.get_logger(__name__)

DATA_FETCH_MESSAGE = "Error fetching analytics data"


async def invalid_parameter_handler(request: Request, exc: InvalidParameterError) -> JSONResponse:
    """Reject malformed query parameters."""
    logger.info(
        "Rejected analytics request",
        path=request.url.path,
        parameter=exc.parameter,
        error=str(exc),
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": str(exc), "parameter": exc.parameter},
    )


async def data_fetch_handler(request: Request, exc: DataFetchError) -> JSONResponse:
    """Hide storage details behind a generic failure."""
    logger.error("Analytics request failed", path=request.url.path, source=exc.source)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": DATA_FETCH_MESSAGE},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvalidParameterError, invalid_parameter_handler)
    app.add_exception_handler(DataFetchError, data_fetch_handler)
