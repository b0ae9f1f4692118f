"""
Interfaces and protocols for dependency injection.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from tasklic.common.models import (
    AcquireLicenseRequest,
    AcquireLicenseResponse,
    LicenseRecord,
    ValidateLicenseRequest,
    ValidateLicenseResponse,
)


class ICredentialStore(Protocol):
    """Protocol for license record persistence."""

    async def replace(self, record: LicenseRecord) -> LicenseRecord: ...

    async def get_active(self, client_id: str) -> LicenseRecord | None: ...

    async def mark_validated(self, record_id: int, when: datetime) -> None: ...

    async def list_records(
        self, application_id: str, client_id: str
    ) -> list[LicenseRecord]: ...


class IRemoteAuthority(Protocol):
    """Protocol for the remote license authority."""

    base_url: str

    def acquire(self, request: AcquireLicenseRequest) -> AcquireLicenseResponse: ...

    def validate(
        self, request: ValidateLicenseRequest, candidate: str
    ) -> ValidateLicenseResponse: ...
