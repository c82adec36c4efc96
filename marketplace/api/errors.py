import logging
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from marketplace.core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidRequestError,
    MarketplaceError,
    NotFoundError,
    OutOfStockError,
)

logger = logging.getLogger(__name__)


def _status_for(exc: MarketplaceError) -> int:
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ForbiddenError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, (OutOfStockError, ConflictError)):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, InvalidRequestError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(MarketplaceError)
    async def handle_marketplace_error(request: Request, exc: MarketplaceError) -> JSONResponse:
        status_code = _status_for(exc)
        logger.info(f"{request.method} {request.url.path} -> {status_code}: {exc}")
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, "type": exc.kind}
        )
