import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tar_validator.config import settings

# ─── Logging setup (file + console) ───
_LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
_LOG_DIR.mkdir(exist_ok=True)

_log_level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

logging.basicConfig(
    level=_log_level,
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[
        logging.StreamHandler(),
        RotatingFileHandler(
            _LOG_DIR / "tar_validator.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        ),
    ],
)

# Quiet noisy libraries
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("pdfminer").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

from tar_validator.routers import documents, logs, rates, tar

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        f"TAR validator starting (per diem year {settings.per_diem_year}, "
        f"buffer ${settings.cost_buffer:g}, max deviation {settings.max_deviation_percent:g}%)"
    )
    yield

    from tar_validator.dependencies import rate_client
    source_close = getattr(rate_client.source, "close", None)
    if source_close:
        source_close()
        logger.info("GSA client closed")


app = FastAPI(
    title="TAR Validator",
    description="Travel Authorization Request per diem validation",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(tar.router, prefix="/api/tar", tags=["tar"])
app.include_router(documents.router, prefix="/api/documents", tags=["documents"])
app.include_router(rates.router, prefix="/api/rates", tags=["rates"])
app.include_router(logs.router, prefix="/api/logs", tags=["logs"])


@app.get("/api/health")
async def health_check():
    return {"status": "ok", "service": "tar-validator"}
