import logging
import os
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Dict

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from src.config import (
    FCM_DRY_RUN,
    FIREBASE_CREDENTIALS,
    FIREBASE_PROJECT_ID,
    HOST,
    LOG_LEVEL,
    PORT,
)
from src.messaging import MessagingClient
from src.routers.rest import router as rest_router
from src.utils import failure_response

# ------------------------ LOGGING ------------------------
logging.disable()
logger.remove()
logger.add(sys.stderr, level=LOG_LEVEL)
# ------------------------ FASTAPI ------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[Dict[str, Any]]:
    """
    Initialize the Firebase client once and share it for the process lifetime.
    """
    app.state.messaging = MessagingClient.from_credentials(
        FIREBASE_CREDENTIALS,
        project_id=FIREBASE_PROJECT_ID,
        dry_run=FCM_DRY_RUN,
    )
    logger.info(
        f"🚀 [{os.getpid()}] Server running on http://{HOST}:{PORT}, Docs: http://{HOST}:{PORT}/docs"
    )

    try:
        yield
    finally:
        app.state.messaging.close()
        logger.info("Application shutdown")


app = FastAPI(
    title="Push Notification Relay",
    description="Relays device, multicast and topic notifications to Firebase Cloud Messaging",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(rest_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Unparseable bodies fail like any other send, not as a client error"""
    logger.error(f"[{request.method}][{request.url.path}] Invalid request body: {exc}")
    return failure_response(
        {
            "type": type(exc).__name__,
            "code": "invalid-argument",
            "message": "Request body could not be parsed",
            "details": exc.errors(),
        }
    )


def run() -> None:
    uvicorn.run("src.main:app", host=HOST, port=PORT)


if __name__ == "__main__":
    run()
