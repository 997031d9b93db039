"""Development launcher for Uvicorn that ensures logging is configured before reload workers start."""

from __future__ import annotations

import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from common.core.config_service import ConfigService
from common.logging.setup_logging import setup_logging


def main() -> None:
    """Configure logging and delegate to uvicorn.run."""

    # Load environment variables BEFORE setting up logging
    env = os.getenv("APP_ENV", "local")
    base_dir = Path(__file__).resolve().parent.parent / "libs" / "common"
    env_file = base_dir / f".env.{env}"
    if env_file.exists():
        _ = load_dotenv(env_file)

    setup_logging()
    config_service = ConfigService()
    uvicorn.run(
        "app.main:app",
        host=str(config_service.get("host", "0.0.0.0")),
        port=int(config_service.get("port", 3000)),
        reload=not config_service.is_production(),
        reload_dirs=[".", "../libs"],  # Watch current dir (backend) and libs
    )


if __name__ == "__main__":
    main()
