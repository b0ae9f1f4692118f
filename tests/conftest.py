from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from tasklic.client.authority import RemoteAuthorityClient
from tasklic.common.crypto import FieldCipher
from tasklic.server.license_manager import LicenseManager
from tasklic.server.persistence import SQLiteCredentialStore

from .helpers import AUTHORITY_URL, FakeClock, FakeSession


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 12, 2, tzinfo=timezone.utc))


@pytest.fixture
def store(tmp_path: Path) -> SQLiteCredentialStore:
    return SQLiteCredentialStore(tmp_path / "licenses.db")


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def manager(
    store: SQLiteCredentialStore, session: FakeSession, clock: FakeClock
) -> LicenseManager:
    """Manager talking to a scripted authority."""
    return LicenseManager(
        store=store,
        authority=RemoteAuthorityClient(AUTHORITY_URL, session=session),  # type: ignore[arg-type]
        cipher=FieldCipher("test-secret"),
        clock=clock,
        app_id="app1",
        fallback_domains=["example.com", "com"],
    )
