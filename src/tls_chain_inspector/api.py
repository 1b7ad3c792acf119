# api.py - FastAPI surface for the chain inspector

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse

from .config import settings
from .errors import ConnectError, NoCertificatesError, TrustStoreError
from .service import inspect_target

logger = logging.getLogger(__name__)

MISSING_PARAMS_MESSAGE = "Query parameters 'ip' and 'url' are required."
NO_CERTIFICATES_MESSAGE = "Server did not provide any certificates."


def configure_logging(level: str = settings.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


configure_logging()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup and shutdown"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Debug mode: {settings.DEBUG}, trust store: {settings.TRUST_STORE}")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}")


app = FastAPI(
    title=settings.APP_NAME,
    description="Inspect and re-validate the TLS certificate chain a server presents",
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan
)


@app.get("/health", tags=["health"])
def health_check():
    """Liveness probe"""
    return {"status": "ok", "version": settings.APP_VERSION}


@app.get("/check-ssl", tags=["certificates"])
def check_ssl(
    ip: Optional[str] = Query(None, description="Address to connect to on the TLS port"),
    url: Optional[str] = Query(None, description="Hostname or URL to present as SNI and validate against"),
):
    """Capture the chain served at `ip` for `url` and report its validity"""
    if not ip or not url:
        return _error(400, MISSING_PARAMS_MESSAGE)

    try:
        report = inspect_target(ip, url, settings=settings)
    except NoCertificatesError:
        return _error(500, NO_CERTIFICATES_MESSAGE)
    except ConnectError as e:
        return _error(500, f"Failed to connect via TLS: {e}")
    except TrustStoreError as e:
        logger.error(f"Trust store unavailable: {e}")
        return _error(500, f"Failed to load trust store: {e}")

    return JSONResponse(content=report.to_dict())
