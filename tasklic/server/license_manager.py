"""
License acquisition and validation engine.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

from tasklic.client.authority import RemoteAuthorityClient
from tasklic.client.domains import candidate_domains
from tasklic.common import Configurable, setup_logger
from tasklic.common.config import Config
from tasklic.common.crypto import FieldCipher, compute_checksum, format_timestamp
from tasklic.common.exceptions import (
    ConfigurationError,
    DomainRejectedError,
    ExpiredLicenseError,
    LicenseError,
)
from tasklic.common.models import (
    AcquireLicenseRequest,
    AcquisitionResult,
    LicenseRecord,
    LicenseStatus,
    UserLimitCheck,
    UserLimits,
    ValidateLicenseRequest,
    ValidateLicenseResponse,
    ValidationResult,
)

from .cache import ValidationCache
from .persistence import SQLiteCredentialStore

if TYPE_CHECKING:
    from tasklic.common.interfaces import ICredentialStore, IRemoteAuthority

NO_LICENSE = "No active license found"
LICENSE_EXPIRED = "License has expired"
VALIDATION_FAILED = "License validation failed"
DOMAIN_REJECTED = "License rejected for this domain"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LicenseManager(Configurable):
    """Acquires licenses from the authority and validates them on demand.

    Validation results are cached per client and domain, and concurrent
    validations for the same key share one underlying check. Public methods
    never raise; failures come back as results.
    """

    OVERRIDABLE = [
        "app_id",
        "cache_ttl",
        "failed_cache_ttl",
        "request_timeout",
        "dev_domain_markers",
        "fallback_domains",
        "db_path",
        "log_level",
    ]

    def __init__(
        self,
        license_manager_url: str | None = None,
        *,
        config: Config | None = None,
        store: ICredentialStore | None = None,
        authority: IRemoteAuthority | None = None,
        cipher: FieldCipher | None = None,
        clock: Callable[[], datetime] | None = None,
        **overrides: Any,
    ):
        self.config = config or Config()
        self.app_id: str
        self.cache_ttl: float
        self.failed_cache_ttl: float
        self.request_timeout: float | None
        self.dev_domain_markers: list[str]
        self.fallback_domains: list[str]
        self.db_path: Path
        self.log_level: int
        self.apply_overrides(overrides, self.config, self.OVERRIDABLE)

        self.logger = logging.getLogger(__name__)
        setup_logger(self.logger, self.log_level)

        self.clock = clock or utcnow
        self.cipher = cipher or FieldCipher(self.config.get_encryption_key())
        self.store: ICredentialStore = store or SQLiteCredentialStore(self.db_path)
        self.cache = ValidationCache(self.clock)

        self.authority: IRemoteAuthority | None = authority
        if authority is not None:
            self.license_manager_url: str | None = authority.base_url
        else:
            self.set_license_manager_url(
                license_manager_url or self.config.LICENSE_MANAGER_URL
            )

    def set_license_manager_url(self, url: str | None) -> None:
        """Point the engine at another authority, or None for local-only mode."""
        self.license_manager_url = url or None
        if not self.license_manager_url:
            self.authority = None
            return
        session = getattr(self.authority, "session", None)
        self.authority = RemoteAuthorityClient(
            self.license_manager_url, timeout=self.request_timeout, session=session
        )

    # Acquisition

    async def acquire_license(
        self,
        client_id: str,
        base_url: str,
        application_id: str | None = None,
        license_manager_url: str | None = None,
    ) -> AcquisitionResult:
        """Obtain a new license from the authority and store it.

        Replaces any license already stored for the client and application.
        """
        try:
            if license_manager_url:
                self.set_license_manager_url(license_manager_url)
            authority = self.authority
            if authority is None:
                msg = "License manager URL not configured"
                raise ConfigurationError(msg)

            app_id = application_id or self.app_id
            request = AcquireLicenseRequest(
                client_id=client_id, app_id=app_id, base_url=base_url
            )
            response = await asyncio.to_thread(authority.acquire, request)

            record = LicenseRecord(
                application_id=app_id,
                client_id=client_id,
                license_key=response.license_key,
                subscription_type=response.subscription_type,
                valid_till=response.valid_till,
                mutual_key=self.cipher.encrypt(response.mutual_key),
                checksum=response.checksum,
                subscription_data=self.cipher.encrypt(
                    json.dumps(response.subscription_data)
                ),
                base_url=base_url,
                is_active=True,
                last_validated=self.clock(),
            )
            stored = await self.store.replace(record)
            self.cache.invalidate_client(client_id)
        except LicenseError as err:
            self.logger.error("License acquisition error: %s", err)  # noqa: TRY400
            return AcquisitionResult(success=False, message=str(err))
        except Exception as err:
            self.logger.exception("License acquisition error")
            return AcquisitionResult(
                success=False, message=str(err) or "Failed to acquire license"
            )

        self.logger.info(
            "License acquired for client %s (%s, valid till %s)",
            client_id,
            stored.subscription_type,
            format_timestamp(stored.valid_till),
        )
        return AcquisitionResult(
            success=True, message="License acquired successfully", license=stored
        )

    # Validation

    async def validate_license(self, client_id: str, domain: str) -> ValidationResult:
        """Check the client's license, served from cache when possible."""
        key = ValidationCache.key(client_id, domain)
        try:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

            task = self.cache.get_pending(key)
            if task is None:
                generation = self.cache.generation(client_id)
                task = asyncio.get_running_loop().create_task(
                    self._perform_validation(client_id, domain, key, generation)
                )
                self.cache.add_pending(key, client_id, task)
            # A caller going away must not cancel the shared check
            return await asyncio.shield(task)
        except Exception:
            self.logger.exception("License validation error")
            return ValidationResult(valid=False, message=VALIDATION_FAILED)

    async def _perform_validation(
        self, client_id: str, domain: str, key: str, generation: int
    ) -> ValidationResult:
        try:
            result = await self._check_license(client_id, domain)
        except ExpiredLicenseError as err:
            result = ValidationResult(valid=False, message=str(err))
        except DomainRejectedError as err:
            self.logger.warning(
                "Every candidate domain was rejected for %s (last: %s)",
                client_id,
                err.domain,
            )
            result = ValidationResult(valid=False, message=DOMAIN_REJECTED)
        except LicenseError as err:
            self.logger.warning("License validation error for %s: %s", client_id, err)
            result = ValidationResult(valid=False, message=VALIDATION_FAILED)
        except Exception:
            self.logger.exception("License validation error for %s", client_id)
            result = ValidationResult(valid=False, message=VALIDATION_FAILED)

        ttl = self.cache_ttl if result.valid else self.failed_cache_ttl
        self.cache.clean_expired()
        if not self.cache.put(key, client_id, result, ttl, generation):
            self.logger.debug("Discarding stale validation result for %s", client_id)
        return result

    async def _check_license(self, client_id: str, domain: str) -> ValidationResult:
        record = await self.store.get_active(client_id)
        if record is None:
            return ValidationResult(valid=False, message=NO_LICENSE)

        now = self.clock()
        if now > record.valid_till:
            raise ExpiredLicenseError(LICENSE_EXPIRED)

        # Sent to the authority as proof of holding the mutual key
        checksum = compute_checksum(
            self.cipher.decrypt(record.mutual_key),
            client_id,
            record.application_id,
            record.license_key,
            format_timestamp(record.valid_till),
        )

        authority = self.authority
        if authority is None:
            record = await self._mark_validated(record, now)
            return ValidationResult(
                valid=True,
                message="License is valid (local validation)",
                license=record,
            )

        request = ValidateLicenseRequest(
            client_id=client_id,
            app_id=record.application_id,
            license_key=record.license_key,
            checksum=checksum,
            domain=domain,
        )
        candidates = candidate_domains(
            domain, record.base_url, self.dev_domain_markers, self.fallback_domains
        )
        response = await self._validate_remotely(authority, request, candidates)

        if response.is_valid:
            record = await self._mark_validated(record, self.clock())
            return ValidationResult(
                valid=True,
                message=response.message or "License is valid",
                license=record,
            )
        return ValidationResult(
            valid=False, message=response.message or VALIDATION_FAILED
        )

    async def _validate_remotely(
        self,
        authority: IRemoteAuthority,
        request: ValidateLicenseRequest,
        candidates: list[str],
    ) -> ValidateLicenseResponse:
        """Try each candidate domain until the authority accepts one.

        Only a domain rejection moves on to the next candidate; any other
        failure aborts the whole validation.
        """
        last_error = DomainRejectedError(request.domain)
        for candidate in candidates:
            try:
                return await asyncio.to_thread(authority.validate, request, candidate)
            except DomainRejectedError as err:
                self.logger.debug("Domain %s rejected, trying next candidate", candidate)
                last_error = err
        raise last_error

    async def _mark_validated(self, record: LicenseRecord, when: datetime) -> LicenseRecord:
        if record.id is not None:
            await self.store.mark_validated(record.id, when)
        return record.model_copy(update={"last_validated": when})

    # Status and limits

    async def get_current_license(self, client_id: str) -> LicenseRecord | None:
        try:
            return await self.store.get_active(client_id)
        except LicenseError as err:
            self.logger.error("Error getting current license: %s", err)  # noqa: TRY400
            return None

    async def get_user_limits(self, client_id: str) -> UserLimits | None:
        """User-count range from the license's subscription data, if present."""
        record = await self.get_current_license(client_id)
        if record is None or not record.subscription_data:
            return None
        try:
            data = json.loads(self.cipher.decrypt(record.subscription_data))
            users = data.get("properties", {}).get("Users")
            if users is None:
                return None
            return UserLimits.model_validate(users)
        except (LicenseError, ValueError, AttributeError) as err:
            self.logger.error("Error getting user limits: %s", err)  # noqa: TRY400
            return None

    async def check_user_limit(
        self, client_id: str, current_user_count: int
    ) -> UserLimitCheck:
        limits = await self.get_user_limits(client_id)
        if limits is None:
            return UserLimitCheck(allowed=True, message="No user limits found in license")

        if current_user_count > limits.maximum:
            return UserLimitCheck(
                allowed=False,
                message=(
                    f"User limit exceeded. Maximum allowed: {limits.maximum}, "
                    f"current: {current_user_count}"
                ),
                limits=limits,
            )
        if current_user_count < limits.minimum:
            return UserLimitCheck(
                allowed=True,
                message=(
                    f"Below minimum user requirement. Minimum: {limits.minimum}, "
                    f"current: {current_user_count}"
                ),
                limits=limits,
            )
        return UserLimitCheck(
            allowed=True,
            message=f"User count within limits ({current_user_count}/{limits.maximum})",
            limits=limits,
        )

    async def get_license_status(self, client_id: str) -> LicenseStatus:
        try:
            record = await self.store.get_active(client_id)
            if record is None:
                return LicenseStatus(
                    has_license=False, is_valid=False, message="No license found"
                )

            expired = self.clock() > record.valid_till
            return LicenseStatus(
                has_license=True,
                is_valid=not expired,
                expires_at=record.valid_till,
                subscription_type=record.subscription_type,
                user_limits=await self.get_user_limits(client_id),
                message=LICENSE_EXPIRED if expired else "License is active",
            )
        except Exception:
            self.logger.exception("Error getting license status")
            return LicenseStatus(
                has_license=False,
                is_valid=False,
                message="Error checking license status",
            )

    def close(self) -> None:
        close = getattr(self.store, "close", None)
        if close is not None:
            close()
