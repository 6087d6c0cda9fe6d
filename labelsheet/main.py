"""
Точка входа FastAPI приложения LabelSheet.

Печать листов со штрихкодами товаров на этикетках Avery L7159.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from labelsheet.api.routes import barcodes, health
from labelsheet.config import get_settings
from labelsheet.logging_config import setup_logging

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifecycle приложения."""
    setup_logging()
    logger.info(f"[START] {settings.app_name} v{settings.app_version}")

    yield

    logger.info(f"[STOP] {settings.app_name}")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
## LabelSheet API

Генерация PDF-листов со штрихкодами CODE128 для товаров каталога.

### Возможности:

* **Строка штрихкода** — {VendorPrefix}-{ProductName}-${Price}, до 32 символов
* **Листы Avery L7159** — 24 этикетки 63.5x33.9мм на A4
* **Pre-flight проверка** — предупреждения до печати
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["Health"])
app.include_router(barcodes.router, prefix="/api/v1", tags=["Barcodes"])


@app.get("/", include_in_schema=False)
async def root() -> dict[str, str]:
    """Корневой эндпоинт — ссылка на документацию."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
