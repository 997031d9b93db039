import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from app.middleware.logging_middleware import RequestContextMiddleware, RequestLoggingMiddleware
from app.routers import router as api_router
from app.service_container import Services
from app.utils.fastapi_utils import install_exception_handlers
from common.core.config_service import settings
from common.logging import setup_logging
from common.utils.utils import get_logger
from ledger_db.db.init_db import init_db

# Load environment variables BEFORE setting up logging
# This ensures LOG_JSON_FORMAT and LOG_LEVEL are visible to the logging config
env = os.getenv("APP_ENV", "local")
base_dir = Path(__file__).resolve().parent.parent.parent / "libs" / "common"
env_file = base_dir / f".env.{env}"
if env_file.exists():
    _ = load_dotenv(env_file)

setup_logging()

logger = get_logger()


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncGenerator[None, Any]:
    logger.info("Starting application database setup")
    await init_db()
    logger.info("Database setup completed successfully", service="database", status="initialized")

    services = Services.instance()
    await services.start()

    yield

    logger.info("Application shutting down")
    await services.stop()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Deposit gateway: hosted checkout sessions and webhook-driven ledger credits",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# 1. Request logging middleware
app.add_middleware(RequestLoggingMiddleware)

# 2. CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 3. Per-request context; added last so it wraps the logging middleware
app.add_middleware(RequestContextMiddleware)

install_exception_handlers(app)

app.include_router(api_router)


@app.get("/", response_class=PlainTextResponse)
async def read_root() -> str:
    return "Deposit gateway is running."


if __name__ == "__main__":
    import uvicorn

    from common.core.config_service import ConfigService

    config_service = ConfigService()

    host = config_service.get("host", "0.0.0.0")
    port = config_service.get("port", 3000)

    logger.info(
        "Starting application server",
        host=host,
        port=port,
        environment=config_service.get_environment(),
    )

    uvicorn.run(app, host=host, port=port)
