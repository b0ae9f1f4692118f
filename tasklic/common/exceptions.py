"""
Custom exceptions for the license system.
"""

from __future__ import annotations


class LicenseError(Exception):
    """Base exception for license failures."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(LicenseError):
    """Exception for missing configuration, e.g. no license manager URL."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 503)


class MalformedResponseError(LicenseError):
    """Exception for authority responses missing required fields."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 502)


class RemoteError(LicenseError):
    """Exception for failed calls to the license authority."""

    def __init__(
        self, message: str, status: int | None = None, body: str = ""
    ) -> None:
        super().__init__(message, 502)
        self.status = status
        self.body = body


class DomainRejectedError(RemoteError):
    """The authority refused the domain (HTTP 403); try the next candidate."""

    def __init__(self, domain: str, body: str = "") -> None:
        super().__init__(f"Domain rejected: {domain}", 403, body)
        self.status_code = 403
        self.domain = domain


class StorageError(LicenseError):
    """Exception for credential store failures."""


class DecryptionError(LicenseError):
    """Exception for stored values that cannot be decrypted."""


class ExpiredLicenseError(LicenseError):
    """Exception for licenses past their validity window."""

    def __init__(self, message: str = "License has expired") -> None:
        super().__init__(message, 403)


class LicenseRequiredError(LicenseError):
    """Exception for gated calls made without a valid license."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 403)
