from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Callable

from tasklic.common.crypto import compute_checksum

AUTHORITY_URL = "https://licenses.example.net"
VALID_TILL = "2025-01-01T00:00:00.000Z"


class MockResponse:
    def __init__(self, status_code: int, json_data: Any = None, text: str = ""):
        self.status_code = status_code
        self._json = json_data
        self.text = text

    def json(self) -> Any:
        if self._json is None:
            msg = "No JSON body"
            raise ValueError(msg)
        return self._json


class FakeSession:
    """requests.Session stand-in that records posts and replays a handler."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.acquire_response: MockResponse = MockResponse(200, acquire_payload())
        self.validate_handler: Callable[[str], MockResponse] = lambda _domain: (
            MockResponse(200, {"valid": True, "message": "License is valid"})
        )

    def post(
        self,
        url: str,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> MockResponse:
        self.calls.append({"url": url, "json": json, "headers": headers})
        if url.endswith("/api/acquire-license"):
            return self.acquire_response
        assert json is not None
        return self.validate_handler(json["domain"])

    def validate_calls(self) -> list[dict[str, Any]]:
        return [c for c in self.calls if c["url"].endswith("/api/validate-license")]


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def acquire_payload(  # noqa: PLR0913
    mutual_key: str = "k",
    client_id: str = "clientA",
    app_id: str = "app1",
    license_key: str = "LIC123",
    valid_till: str = VALID_TILL,
    minimum: int = 1,
    maximum: int = 10,
) -> dict[str, Any]:
    return {
        "license_key": license_key,
        "subscription_type": "pro",
        "valid_till": valid_till,
        "checksum": compute_checksum(
            mutual_key, client_id, app_id, license_key, valid_till
        ),
        "mutual_key": mutual_key,
        "subscription_data": {
            "type": "object",
            "properties": {
                "Users": {"type": "integer", "minimum": minimum, "maximum": maximum}
            },
            "required": ["Users"],
        },
        "message": "License issued",
    }


