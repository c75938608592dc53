"""
FastAPI application for the curation registry.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.routers import agents, collaborations, collections, events, sessions
from config_system.config_loader import RegistryConfig
from core.registry import CurationRegistry
from exceptions import RegistryError
from logging_config import log_debug, log_error

logger = logging.getLogger("api")


def _error_response(status_code: int, message: str, details=None) -> JSONResponse:
    content = {"success": False, "error": message}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """Map registry exceptions and request validation failures onto JSON errors."""

    @app.exception_handler(RegistryError)
    async def registry_error_handler(request: Request, exc: RegistryError):
        if exc.status_code >= 500:
            log_error(logger, f"Registry failure on {request.url.path}: {exc}", "API", exc)
        else:
            log_debug(logger, "Request rejected", "API", {
                "path": request.url.path,
                "status_code": exc.status_code,
                "error": str(exc),
            })
        message = str(exc) if exc.status_code < 500 else "Internal server error"
        return _error_response(exc.status_code, message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(part) for part in error.get("loc", ())), "message": error.get("msg")}
            for error in exc.errors()
        ]
        return _error_response(400, "Invalid request", errors)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        log_error(logger, f"Unexpected error on {request.url.path}: {exc}", "API", exc)
        return _error_response(500, "Internal server error")


def create_app(config: Optional[RegistryConfig] = None,
               registry: Optional[CurationRegistry] = None) -> FastAPI:
    """Build the application around a registry rooted at the configured data directory."""
    config = config or (registry.config if registry else RegistryConfig())
    registry = registry or CurationRegistry(config)

    app = FastAPI(title="Eden Genesis Curation Registry", version="0.1.0")
    app.state.registry = registry

    register_exception_handlers(app)

    prefix = config.api_prefix.rstrip("/")

    @app.get(f"{prefix}/health")
    def health():
        return {"success": True, "status": "ok", "dataDirectory": str(registry.data_path)}

    app.include_router(collaborations.router, prefix=f"{prefix}/collaborations", tags=["collaborations"])
    app.include_router(collections.router, prefix=f"{prefix}/collections", tags=["collections"])
    app.include_router(sessions.router, prefix=f"{prefix}/curation", tags=["curation"])
    app.include_router(agents.router, prefix=f"{prefix}/agents", tags=["agents"])
    app.include_router(events.router, prefix=f"{prefix}/events", tags=["events"])

    return app
