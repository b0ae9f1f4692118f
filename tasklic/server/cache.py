"""
Validation result cache and in-flight request tracking.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from datetime import datetime

    from tasklic.common.models import ValidationResult


@dataclass
class CacheEntry:
    client_id: str
    result: ValidationResult
    stored_at: datetime
    ttl: float


class ValidationCache:
    """Short-lived validation results plus the validations still running.

    Both maps are keyed by ``"<client_id>:<domain>"``. Each client also has a
    generation number, bumped by :meth:`invalidate_client`; results computed
    under an older generation are not stored.
    """

    def __init__(self, clock: Callable[[], datetime]):
        self.clock = clock
        self.entries: dict[str, CacheEntry] = {}
        self.pending: dict[str, asyncio.Task[ValidationResult]] = {}
        self.pending_clients: dict[str, str] = {}
        self.generations: dict[str, int] = {}

    @staticmethod
    def key(client_id: str, domain: str) -> str:
        return f"{client_id}:{domain}"

    def get(self, key: str) -> ValidationResult | None:
        """Return the cached result if it is younger than its TTL."""
        entry = self.entries.get(key)
        if entry is None:
            return None
        age = (self.clock() - entry.stored_at).total_seconds()
        if age < entry.ttl:
            return entry.result
        del self.entries[key]
        return None

    def generation(self, client_id: str) -> int:
        return self.generations.get(client_id, 0)

    def put(
        self,
        key: str,
        client_id: str,
        result: ValidationResult,
        ttl: float,
        generation: int | None = None,
    ) -> bool:
        """Store a result unless the client was invalidated since ``generation``."""
        if generation is not None and generation != self.generation(client_id):
            return False
        self.entries[key] = CacheEntry(client_id, result, self.clock(), ttl)
        return True

    def get_pending(self, key: str) -> asyncio.Task[ValidationResult] | None:
        return self.pending.get(key)

    def add_pending(
        self, key: str, client_id: str, task: asyncio.Task[ValidationResult]
    ) -> None:
        """Track an in-flight validation until it finishes, however it ends."""
        self.pending[key] = task
        self.pending_clients[key] = client_id

        def _release(done: asyncio.Task[ValidationResult]) -> None:
            if self.pending.get(key) is done:
                del self.pending[key]
                del self.pending_clients[key]

        task.add_done_callback(_release)

    def invalidate_client(self, client_id: str) -> None:
        """Drop every cached result for a client and detach its running checks.

        Detached checks still finish for the callers already awaiting them,
        but their results are not cached and new callers start a fresh check.
        """
        self.generations[client_id] = self.generation(client_id) + 1
        for key in [k for k, e in self.entries.items() if e.client_id == client_id]:
            del self.entries[key]
        for key in [k for k, c in self.pending_clients.items() if c == client_id]:
            del self.pending[key]
            del self.pending_clients[key]

    def clean_expired(self) -> None:
        now = self.clock()
        expired = [
            key
            for key, entry in self.entries.items()
            if (now - entry.stored_at).total_seconds() >= entry.ttl
        ]
        for key in expired:
            del self.entries[key]
