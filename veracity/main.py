"""
Veracity FastAPI Application — rule-based validation of AI assistant output.

  POST /validate          → full pipeline (rules, rewrite, scan, cross-check)
  POST /validate/minimal  → allow-listed rules only
  POST /tech-debt         → code-quality heuristics over fenced code
  /rules, /alerts, /audit → rule management, alert state, audit trail
  GET  /health            → {"status": "ok", ...}
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from veracity.api.dependencies import get_alert_scheduler
from veracity.api.routes.alerts import router as alerts_router
from veracity.api.routes.health import router as health_router
from veracity.api.routes.rules import router as rules_router
from veracity.api.routes.validate import router as validate_router
from veracity.config import settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("veracity")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifecycle: cancel pending alert timers on shutdown."""
    yield
    get_alert_scheduler().cancel_all()
    logger.info("Cancelled pending alert timers")


app = FastAPI(
    title="Veracity",
    description="Rule-based validation of AI assistant responses",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(validate_router)
app.include_router(rules_router)
app.include_router(alerts_router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    body = await request.body()
    logger.error(f"Validation Error. Raw body: {body.decode('utf-8')[:500]} | Errors: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors()), "body": body.decode("utf-8")[:100]},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("veracity.main:app", host=settings.host, port=settings.port)
