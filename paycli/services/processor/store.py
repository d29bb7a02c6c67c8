"""In-memory payment store and transition audit trail.

Handlers depend only on the `PaymentStore` capability. The in-memory
implementation serialises read-modify-write sequences per payment ID through
`locked()`, so a caller that shares one store across threads cannot apply a
transition computed from a stale read.
"""

import threading
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Protocol

from paycli.services.processor.models import Payment, TimelineEntry


class PaymentStore(Protocol):
    """Keyed payment storage consumed by the command handlers."""

    def get(self, payment_id: str) -> Payment | None: ...

    def upsert(self, payment_id: str, payment: Payment) -> None: ...

    def list_all(self) -> list[Payment]: ...

    def locked(self, payment_id: str) -> AbstractContextManager[None]: ...


class InMemoryPaymentStore:
    """Process-local payment map with per-ID locks."""

    def __init__(self) -> None:
        self._payments: dict[str, Payment] = {}
        self._key_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def get(self, payment_id: str) -> Payment | None:
        with self._lock:
            return self._payments.get(payment_id)

    def upsert(self, payment_id: str, payment: Payment) -> None:
        with self._lock:
            self._payments[payment_id] = payment

    def list_all(self) -> list[Payment]:
        with self._lock:
            return list(self._payments.values())

    @contextmanager
    def locked(self, payment_id: str) -> Iterator[None]:
        """Hold the lock for one payment ID for a read-modify-write."""

        with self._lock:
            key_lock = self._key_locks.setdefault(payment_id, threading.Lock())
        with key_lock:
            yield


class PaymentTimeline:
    """Thread-safe append-only list of state writes."""

    def __init__(self) -> None:
        self._entries: list[TimelineEntry] = []
        self._lock = threading.Lock()

    def record(self, entry: TimelineEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def entries(self, payment_id: str | None = None) -> list[TimelineEntry]:
        with self._lock:
            if payment_id is None:
                return list(self._entries)
            return [e for e in self._entries if e.payment_id == payment_id]
