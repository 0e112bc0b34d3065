"""Map record errors raised by the services to JSON HTTP responses."""
import logging
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.services import errors
from app.services.errors import RecordError

logger = logging.getLogger(__name__)

STATUS_BY_CODE = {
    errors.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    errors.DANGLING_REFERENCE: status.HTTP_422_UNPROCESSABLE_ENTITY,
    errors.INCONSISTENT_FLAG: status.HTTP_422_UNPROCESSABLE_ENTITY,
    errors.VALIDATION_ERROR: status.HTTP_422_UNPROCESSABLE_ENTITY,
    errors.IMMUTABLE_FIELD: status.HTTP_409_CONFLICT,
    errors.REFERENCED_RECORD: status.HTTP_409_CONFLICT,
    errors.DUPLICATE: status.HTTP_409_CONFLICT,
    errors.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
}


async def record_error_handler(request: Request, exc: RecordError) -> JSONResponse:
    status_code = STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST)
    logger.info(f"{request.method} {request.url.path} rejected: {exc.code} {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def add_error_handlers(app: FastAPI):
    """Register the record error handler on the application."""
    app.add_exception_handler(RecordError, record_error_handler)
