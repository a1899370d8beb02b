# 📄 phishsim/main.py – management service: campaigns, click tracking, templates

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from phishsim.config import settings
from phishsim.database import init_db
from phishsim.errors import PhishingError, SendFailed, ValidationError
from phishsim.routes import campaigns as campaign_routes
from phishsim.routes import click_tracking
from phishsim.schemas import CampaignRead, ErrorResponse
from phishsim.utils import utcnow
from phishsim.dev import router as dev_router

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")
logger = logging.getLogger(__name__)


# ────────────── Error Logging ──────────────
elog = logging.getLogger("error_logger")
elog.setLevel(logging.ERROR)
if not elog.handlers:
    fh = logging.FileHandler(settings.ERROR_LOG_PATH, delay=True)
    fh.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))
    elog.addHandler(fh)


# ────────────── App & Routers ──────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Management service up, simulation channel at %s", settings.SIMULATION_URL)
    yield


app = FastAPI(title="Phishing Management Service", lifespan=lifespan)
app.include_router(campaign_routes.router)
app.include_router(click_tracking.router)
app.include_router(dev_router)


@app.exception_handler(PhishingError)
async def _domain_error(request: Request, exc: PhishingError):
    body = ErrorResponse(
        code=exc.code,
        message=exc.message,
        path=request.url.path,
        timestamp=utcnow(),
    )
    if isinstance(exc, ValidationError):
        body.errors = exc.errors
    if isinstance(exc, SendFailed) and exc.campaign is not None:
        body.campaign = CampaignRead.model_validate(exc.campaign)
    logger.warning("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc)
    return JSONResponse(status_code=exc.status_code, content=body.to_wire())


@app.exception_handler(Exception)
async def _unhandled(request: Request, exc: Exception):
    elog.error("URL: %s METHOD: %s\n%r", request.url, request.method, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal error"})


@app.get("/health")
def health():
    return {"status": "ok", "timestamp": utcnow().isoformat()}


# ────────────── CLI Entrypoint ──────────────
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("phishsim.main:app", host="0.0.0.0", port=int(os.getenv("PORT", 8000)), reload=True)
