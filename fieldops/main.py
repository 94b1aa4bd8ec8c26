"""
ASGI entry point for the FieldOps import engine.

Serves the import wizard endpoints under ``API_PREFIX`` and renders every
error, ours or FastAPI's, in one JSON envelope.
"""
from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from fieldops.api.router import api_router
from fieldops.core.config import settings
from fieldops.core.events import lifespan
from fieldops.core.exceptions import FieldOpsException
from fieldops.schemas.imports import EntityType

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("fieldops")

app = FastAPI(
    title=settings.PROJECT_NAME,
    description=settings.PROJECT_DESCRIPTION,
    version=settings.VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def error_response(status_code: int, code: str, message, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "code": code, "message": message, "details": details},
    )


@app.exception_handler(FieldOpsException)
async def fieldops_exception_handler(request: Request, exc: FieldOpsException):
    """Import, mapping and tenant errors raised by the endpoints."""
    return error_response(exc.status_code, exc.code, exc.message, exc.details)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies, paths or forms, e.g. an unknown entity type."""
    return error_response(
        422,
        "REQUEST_INVALID",
        "Request could not be validated",
        {"errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return error_response(exc.status_code, f"HTTP_{exc.status_code}", exc.detail)


app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/", tags=["Health"])
async def root():
    """Liveness check; also lists what can be imported and the upload limits."""
    return {
        "status": "ok",
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "entity_types": [entity_type.value for entity_type in EntityType],
        "limits": {
            "max_file_size": settings.IMPORT_MAX_FILE_SIZE,
            "max_rows": settings.IMPORT_MAX_ROWS,
        },
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
