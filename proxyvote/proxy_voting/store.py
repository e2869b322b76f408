"""
Durable key-value storage for the voting engine.

The engine only needs point reads and writes. Keys are plain strings built
by `DataKey`; values are anything `json` can encode. `lock()` serializes
whole operations, so no two of them interleave their reads and writes.
"""
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager

from django.db import transaction
from django.utils import timezone


class DataKey:
    """Builds the discriminated store keys for every piece of election state."""
    ADMIN = "admin"
    PARTIES = "parties"
    VOTING_DEADLINE = "voting_deadline"
    TOTAL_VOTERS = "total_voters"
    # Row touched by ModelStore.lock(); holds no election state.
    LOCK = "lock"

    @staticmethod
    def votes(party):
        return f"votes:{party}"

    @staticmethod
    def voter_status(voter):
        return f"voter_status:{voter}"

    @staticmethod
    def delegated_votes(voter):
        return f"delegated_votes:{voter}"


class DurableStore(ABC):

    @abstractmethod
    def get(self, key, default=None):
        """Returns the value stored under `key`, or `default`."""

    @abstractmethod
    def set(self, key, value):
        """Stores `value` under `key`, replacing any previous value."""

    @abstractmethod
    def has(self, key):
        """Returns True if `key` has ever been written."""

    @abstractmethod
    def lock(self):
        """
        Context manager held for a whole operation. Only one holder
        at a time, across every engine sharing this election.
        """


class MemoryStore(DurableStore):
    """A process-local store. Useful for tests and simulations."""

    def __init__(self):
        self._data = {}
        self._lock = threading.RLock()

    def get(self, key, default=None):
        return self._data.get(key, default)

    def set(self, key, value):
        self._data[key] = value

    def has(self, key):
        return key in self._data

    @contextmanager
    def lock(self):
        with self._lock:
            yield

    def __len__(self):
        return len(self._data)


class ModelStore(DurableStore):
    """
    Keeps each key in its own `StoreEntry` row.

    `lock()` opens a transaction and writes the lock row first. The row
    lock (or SQLite's database write lock) is held until commit, so a
    concurrent operation waits and then reads the committed state.
    """

    def __init__(self):
        # Imported here so the module can be used before apps are loaded.
        from .models import StoreEntry
        self.model = StoreEntry

    def get(self, key, default=None):
        entry = self.model.objects.filter(key=key).only("value").first()
        if entry is None:
            return default
        return entry.value

    def set(self, key, value):
        self.model.objects.update_or_create(key=key, defaults={"value": value})

    def has(self, key):
        return self.model.objects.filter(key=key).exists()

    @contextmanager
    def lock(self):
        with transaction.atomic():
            self.model.objects.get_or_create(key=DataKey.LOCK)
            self.model.objects.filter(key=DataKey.LOCK).update(updated_at=timezone.now())
            yield
