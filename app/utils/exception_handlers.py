import uuid
from typing import cast

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse
from loguru import logger
from starlette.exceptions import HTTPException

from app.utils.pages import render_error


def http_exception_handler(_request: Request, exc: Exception) -> HTMLResponse:
    exc = cast(HTTPException, exc)
    return HTMLResponse(render_error(str(exc.detail)), status_code=exc.status_code)


def validation_exception_handler(request: Request, exc: Exception) -> HTMLResponse:
    exc = cast(RequestValidationError, exc)
    missing = [str(err["loc"][-1]) for err in exc.errors()]
    logger.debug(f"Invalid request on {request.url.path}: {exc.errors()}")
    return HTMLResponse(
        render_error(f"Invalid or missing parameters: {', '.join(missing)}"),
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
    )


def general_exception_handler(request: Request, exc: Exception) -> HTMLResponse:
    correlation_id = str(uuid.uuid4())
    logger.opt(exception=exc).error(f"[{correlation_id}] Unhandled error on {request.url.path}")
    return HTMLResponse(
        render_error("Internal Server Error", correlation_id),
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
