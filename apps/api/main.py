"""
EcoCredit - FastAPI Backend
Main application entry point with health check and API routing.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from config import settings, validate_security_settings
from database import engine, Base
from errors import EcoCreditError, InvalidInputError
import models  # noqa: F401
from routers import (
    health,
    auth,
    billing,
    recycling,
    dashboard,
    leaderboard,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    print("🚀 Starting EcoCredit API...")
    validate_security_settings()
    if settings.AUTO_CREATE_DB_SCHEMA:
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            print("🗄️ Database schema verified.")
        except Exception as e:
            print(f"⚠️ Database bootstrap skipped: {e}")
    yield
    # Shutdown
    await engine.dispose()
    print("👋 Shutting down API...")


app = FastAPI(
    title="EcoCredit API",
    description="Track energy and recycling activity, earn carbon credits and climb the leaderboard",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(EcoCreditError)
async def eco_credit_error_handler(request: Request, exc: EcoCreditError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = [".".join(str(part) for part in err.get("loc", ()) if part != "body") for err in exc.errors()]
    detail = "Invalid input: " + ", ".join(field for field in fields if field) if fields else "Invalid input"
    return JSONResponse(status_code=InvalidInputError.status_code, content=InvalidInputError(detail).to_payload())


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(billing.router, prefix="/billing", tags=["Billing"])
app.include_router(recycling.router, prefix="/recycling", tags=["Recycling"])
app.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
app.include_router(leaderboard.router, prefix="/leaderboard", tags=["Leaderboard"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "EcoCredit API",
        "version": "0.1.0",
        "status": "running"
    }
