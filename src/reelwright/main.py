"""Reelwright: reusable challenge-video templates rendered into scripts.

Run with:  uvicorn reelwright.main:app --reload
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from reelwright.config import settings

# Configure logging for all reelwright modules
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from reelwright.api.dependencies import get_engine
from reelwright.api.instances import router as instances_router
from reelwright.api.templates import router as templates_router
from reelwright.errors import TemplateSystemError

log = logging.getLogger(__name__)

_STATUS_BY_CODE = {
    "INVALID_INPUT": 400,
    "TEMPLATE_NOT_FOUND": 404,
    "INSTANCE_NOT_FOUND": 404,
    "DUPLICATE_TEMPLATE": 409,
    "TEMPLATE_VALIDATION_FAILED": 422,
    "CUSTOMIZATION_VALIDATION_FAILED": 422,
    "SCRIPT_GENERATION_FAILED": 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    get_engine()
    yield


app = FastAPI(
    title="Reelwright",
    description=(
        "Register parameterized challenge-video templates, create customized "
        "instances and render them into timed scripts."
    ),
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(TemplateSystemError)
async def template_system_error_handler(request: Request, exc: TemplateSystemError):
    status = _STATUS_BY_CODE.get(exc.code, 500)
    if status >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    body = {"code": exc.code, "detail": exc.message}
    issues = getattr(exc, "issues", None)
    if issues is not None:
        body["issues"] = issues
    return JSONResponse(status_code=status, content=body)


# ── API routers ──────────────────────────────────────────────────────────
app.include_router(templates_router)
app.include_router(instances_router)
