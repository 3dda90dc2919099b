from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException

from app.api import oauth2, pages
from app.auth.google import GoogleAuth
from app.utils.exception_handlers import (
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)


def create_app(auth: GoogleAuth) -> FastAPI:
    """Build the OAuth2 callback server around the shared `GoogleAuth`."""
    app = FastAPI(title="SMP Link", docs_url=None, redoc_url=None)
    app.state.auth = auth

    app.include_router(oauth2.router)
    app.include_router(pages.router)

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    @app.get("/")
    async def healthz() -> str:
        return "OK"

    return app
