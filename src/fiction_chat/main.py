# src/fiction_chat/main.py
"""Main entry point for the Fiction Chat application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from fiction_chat.api.v1 import admin_router, chat_router, socket_router
from fiction_chat.core.errors import ChatError, PersistenceError
from fiction_chat.core.logging import configure_logging
from fiction_chat.core.settings import settings
from fiction_chat.db.session import SessionLocal, create_tables
from fiction_chat.services.session_registry import SessionRegistry
from fiction_chat.services.user_sync import sync_users

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="One-to-one chat between users of a host application",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# One registry per process; sockets and REST sends share it.
app.state.session_registry = SessionRegistry()

# Include API routers
app.include_router(chat_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")
app.include_router(socket_router, prefix="/api/v1")
app.include_router(socket_router)


@app.exception_handler(ChatError)
async def chat_error_handler(request: Request, exc: ChatError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Unhandled database error on %s: %s", request.url.path, exc, exc_info=True)
    error = PersistenceError()
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


def _prepare_database() -> None:
    if settings.create_tables_on_startup:
        create_tables()
    if settings.sync_users_on_startup:
        with SessionLocal() as db:
            sync_users(db)


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging(settings.log_level)
    await run_in_threadpool(_prepare_database)
    logger.info("%s %s started", settings.app_name, settings.app_version)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    registry: SessionRegistry = app.state.session_registry
    await registry.close_all()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "websocket": "/api/v1/ws?token=<jwt>",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("fiction_chat.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
