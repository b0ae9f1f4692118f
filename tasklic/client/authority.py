"""
HTTP client for the remote license authority.
"""

from __future__ import annotations

import logging
from typing import Any

import requests
from pydantic import ValidationError

from tasklic.common.exceptions import (
    DomainRejectedError,
    MalformedResponseError,
    RemoteError,
)
from tasklic.common.models import (
    AcquireLicenseRequest,
    AcquireLicenseResponse,
    ValidateLicenseRequest,
    ValidateLicenseResponse,
)

ACQUIRE_PATH = "/api/acquire-license"
VALIDATE_PATH = "/api/validate-license"
HTTP_FORBIDDEN = 403
SECRET_FIELDS = ("mutual_key",)


def origin_for(candidate: str) -> str:
    """Origin header value for a candidate domain."""
    if "://" in candidate:
        return candidate
    return f"https://{candidate}"


def _redacted(data: Any) -> Any:
    if not isinstance(data, dict):
        return data
    return {k: ("***" if k in SECRET_FIELDS else v) for k, v in data.items()}


class RemoteAuthorityClient:
    """Blocking client for the authority's acquire and validate endpoints."""

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logging.getLogger(__name__)

    def _post(
        self,
        path: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            return self.session.post(
                url, json=payload, headers=headers, timeout=self.timeout
            )
        except requests.RequestException as err:
            msg = f"License manager unreachable: {err}"
            raise RemoteError(msg) from err

    @staticmethod
    def _json(response: requests.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as err:
            msg = "License manager returned invalid JSON"
            raise MalformedResponseError(msg) from err
        if not isinstance(data, dict):
            msg = "License manager returned an unexpected payload"
            raise MalformedResponseError(msg)
        return data

    def acquire(self, request: AcquireLicenseRequest) -> AcquireLicenseResponse:
        """Request a new license from the authority."""
        self.logger.info("Acquiring license from: %s%s", self.base_url, ACQUIRE_PATH)
        self.logger.debug("Request payload: %s", request.model_dump())

        response = self._post(ACQUIRE_PATH, request.model_dump())
        if not 200 <= response.status_code < 300:  # noqa: PLR2004
            msg = (
                f"License manager responded with status: "
                f"{response.status_code} - {response.text}"
            )
            raise RemoteError(msg, response.status_code, response.text)

        data = self._json(response)
        self.logger.debug("License response received: %s", _redacted(data))

        if not data.get("mutual_key"):
            msg = (
                "Missing mutual_key in response. License manager must provide "
                "mutual_key for checksum validation."
            )
            raise MalformedResponseError(msg)
        try:
            return AcquireLicenseResponse.model_validate(data)
        except ValidationError as err:
            missing = sorted({str(e["loc"][0]) for e in err.errors() if e["loc"]})
            msg = f"Missing or invalid fields in response: {', '.join(missing)}"
            raise MalformedResponseError(msg) from err

    def validate(
        self, request: ValidateLicenseRequest, candidate: str
    ) -> ValidateLicenseResponse:
        """Ask the authority to validate a license for one candidate domain."""
        origin = origin_for(candidate)
        payload = request.model_copy(update={"domain": candidate}).model_dump()
        self.logger.debug("Validation request for %s: %s", candidate, payload)

        response = self._post(
            VALIDATE_PATH, payload, headers={"Origin": origin, "Referer": origin}
        )
        if response.status_code == HTTP_FORBIDDEN:
            raise DomainRejectedError(candidate, response.text)
        if not 200 <= response.status_code < 300:  # noqa: PLR2004
            msg = f"Validation failed with status: {response.status_code}"
            raise RemoteError(msg, response.status_code, response.text)

        data = self._json(response)
        self.logger.debug("Validation response: %s", data)
        try:
            return ValidateLicenseResponse.model_validate(data)
        except ValidationError as err:
            msg = "License manager returned an unexpected validation payload"
            raise MalformedResponseError(msg) from err
