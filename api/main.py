"""
FastAPI application for guest email verification.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from api.guest import router as guest_router
from api.handlers import (
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    verification_exception_handler,
)
from api.policy import router as policy_router
from config import Config
from verification.dependencies import get_config
from verification.exceptions import VerificationException

# Validate configuration on startup
Config.validate()
get_config().validate()

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown."""
    config = get_config()
    logger.info(
        f"Starting guest verification API (environment={config.ENVIRONMENT}, "
        f"claimed domains={len(config.CLAIMED_ORG_DOMAINS)})"
    )
    if config.EXPOSE_DEV_CODE:
        logger.warning("EXPOSE_DEV_CODE is on: verification codes are echoed in responses")
    yield
    logger.info("Shutting down guest verification API")


app = FastAPI(
    title=Config.APP_NAME,
    description="One-time email codes for guest sign-up",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(VerificationException, verification_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

app.include_router(guest_router, prefix="/api/guest", tags=["guest"])
app.include_router(policy_router, prefix="/api/policy", tags=["policy"])


@app.get("/health")
async def health():
    """Health check."""
    return {"status": "healthy"}
