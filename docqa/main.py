# Run from project root: python -m docqa.main  (or uvicorn docqa.main:app --port 3000)

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from docqa.api.routes import router
from docqa.core.config import (
    APP_TITLE,
    GENERIC_ERROR_MESSAGE,
    LOG_LEVEL,
    PORT,
    WEB_SEARCH_PROVIDER,
    WEB_SEARCH_PROVIDERS,
)

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


def check_settings(provider: str = WEB_SEARCH_PROVIDER) -> None:
    """Fail at startup on configuration that would break every chat request."""
    if provider not in WEB_SEARCH_PROVIDERS:
        raise RuntimeError(f"Unknown WEB_SEARCH_PROVIDER {provider!r}; expected one of {', '.join(WEB_SEARCH_PROVIDERS)}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    check_settings()
    yield


app = FastAPI(title=APP_TITLE, lifespan=lifespan)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
app.include_router(router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("[api] invalid request body for %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("[api] unhandled error on %s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": GENERIC_ERROR_MESSAGE})


if __name__ == "__main__":
    logger.info("Server listening on port %d", PORT)
    uvicorn.run(app, host="0.0.0.0", port=PORT)
