"""
Pydantic models for request/response validation.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Authority wire format


class AcquireLicenseRequest(BaseModel):
    client_id: str
    app_id: str
    base_url: str


class AcquireLicenseResponse(BaseModel):
    license_key: str = Field(min_length=1)
    subscription_type: str = Field(min_length=1)
    valid_till: datetime
    checksum: str = Field(min_length=1)
    mutual_key: str = Field(min_length=1)
    subscription_data: dict[str, Any] = Field(min_length=1)
    message: str = ""

    @field_validator("valid_till")
    @classmethod
    def valid_till_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


class ValidateLicenseRequest(BaseModel):
    client_id: str
    app_id: str
    license_key: str
    checksum: str
    domain: str


class ValidateLicenseResponse(BaseModel):
    # Kept raw; only a JSON true or the word "valid" count as valid
    valid: Any = None
    status: Any = None
    message: str | None = None
    validated_at: Any = None
    expires_at: Any = None
    subscription_data: Any = None

    @field_validator("message", mode="before")
    @classmethod
    def message_text(cls, value: Any) -> str | None:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @property
    def is_valid(self) -> bool:
        """Authorities answer with either a boolean or a status word."""
        if self.valid is True:
            return True
        return isinstance(self.status, str) and self.status.lower() == "valid"


# Persisted state


class LicenseRecord(BaseModel):
    """A stored license. mutual_key and subscription_data hold ciphertext."""

    id: int | None = None
    application_id: str
    client_id: str
    license_key: str
    subscription_type: str
    valid_till: datetime
    mutual_key: str
    checksum: str
    subscription_data: str
    base_url: str | None = None
    is_active: bool = True
    last_validated: datetime | None = None
    created_at: datetime | None = None

    @field_validator("valid_till", "last_validated", "created_at")
    @classmethod
    def timestamps_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    def public_dict(self) -> dict[str, Any]:
        """Serializable view without the encrypted fields."""
        return self.model_dump(
            mode="json", exclude={"mutual_key", "subscription_data"}
        )


# Engine results


class UserLimits(BaseModel):
    minimum: StrictInt
    maximum: StrictInt


class AcquisitionResult(BaseModel):
    success: bool
    message: str
    license: LicenseRecord | None = None


class ValidationResult(BaseModel):
    valid: bool
    message: str
    license: LicenseRecord | None = None


class UserLimitCheck(BaseModel):
    allowed: bool
    message: str
    limits: UserLimits | None = None


class LicenseStatus(BaseModel):
    has_license: bool
    is_valid: bool
    expires_at: datetime | None = None
    subscription_type: str | None = None
    user_limits: UserLimits | None = None
    message: str


# Admin HTTP surface


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AcquireRequest(_CamelModel):
    client_id: str = Field(alias="clientId", min_length=1)
    base_url: str = Field(alias="baseUrl", min_length=1)
    app_id: str | None = Field(default=None, alias="appId")
    license_manager_url: str | None = Field(default=None, alias="licenseManagerUrl")


class ValidateRequest(_CamelModel):
    client_id: str = Field(alias="clientId", min_length=1)
    domain: str = Field(min_length=1)


class UserLimitRequest(_CamelModel):
    client_id: str = Field(alias="clientId", min_length=1)
    current_user_count: int = Field(alias="currentUserCount", ge=0)
