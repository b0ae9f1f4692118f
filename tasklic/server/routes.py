"""
Routes for the license admin API.
"""

from __future__ import annotations

import time
from typing import Any

from fastapi import FastAPI, Query

from tasklic.common.models import AcquireRequest, UserLimitRequest, ValidateRequest

from .license_manager import LicenseManager


class LicenseRoutes:
    """Handles FastAPI routes exposing the license engine to the admin UI."""

    def __init__(self, manager: LicenseManager):
        self.manager = manager

    def setup_routes(self, app: FastAPI) -> None:
        """Setup API routes on the FastAPI app."""

        app.get("/health")(self.health)
        app.get("/api/license/status")(self.status)
        app.post("/api/license/acquire")(self.acquire)
        app.post("/api/license/validate")(self.validate)
        app.get("/api/license/limits")(self.limits)
        app.post("/api/license/check-user-limit")(self.check_user_limit)

    async def health(self) -> dict[str, Any]:
        """Handle /health endpoint."""
        return {
            "status": "ok",
            "timestamp": int(time.time()),
            "remote_validation": self.manager.license_manager_url is not None,
        }

    async def status(self, client_id: str = Query(min_length=1)) -> dict[str, Any]:
        """Handle /api/license/status endpoint."""
        result = await self.manager.get_license_status(client_id)
        return result.model_dump(mode="json")

    async def acquire(self, req: AcquireRequest) -> dict[str, Any]:
        """Handle /api/license/acquire endpoint."""
        result = await self.manager.acquire_license(
            req.client_id,
            req.base_url,
            application_id=req.app_id,
            license_manager_url=req.license_manager_url,
        )
        return {
            "success": result.success,
            "message": result.message,
            "license": result.license.public_dict() if result.license else None,
        }

    async def validate(self, req: ValidateRequest) -> dict[str, Any]:
        """Handle /api/license/validate endpoint."""
        result = await self.manager.validate_license(req.client_id, req.domain)
        return {
            "valid": result.valid,
            "message": result.message,
            "license": result.license.public_dict() if result.license else None,
        }

    async def limits(self, client_id: str = Query(min_length=1)) -> dict[str, Any]:
        """Handle /api/license/limits endpoint."""
        limits = await self.manager.get_user_limits(client_id)
        return {"limits": limits.model_dump() if limits else None}

    async def check_user_limit(self, req: UserLimitRequest) -> dict[str, Any]:
        """Handle /api/license/check-user-limit endpoint."""
        result = await self.manager.check_user_limit(
            req.client_id, req.current_user_count
        )
        return result.model_dump(mode="json")
