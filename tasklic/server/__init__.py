"""
Entry point for the license admin API.
"""

import logging

import uvicorn
from fastapi import FastAPI

from tasklic.common.config import Config

from .license_manager import LicenseManager
from .routes import LicenseRoutes


def create_app(manager: LicenseManager) -> FastAPI:
    """Build a FastAPI app serving the license endpoints for ``manager``."""
    app = FastAPI(title="tasklic")
    LicenseRoutes(manager).setup_routes(app)
    app.state.license_manager = manager
    return app


def start_server(config: Config | None = None) -> None:
    """Start the license admin API."""
    if config is None:
        config = Config()
    logging.basicConfig(level=config.LOG_LEVEL)
    manager = LicenseManager(config=config)
    uvicorn.run(create_app(manager), host=config.SERVER_HOST, port=config.SERVER_PORT)
