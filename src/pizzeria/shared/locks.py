"""Per-entity serialization of read-modify-write operations.

Stock adjustments and order transitions load an aggregate, mutate it and
persist it. Two requests racing on the same id would both read the same
previous value, so callers wrap the whole command (unit of work included) in
``hold(kind, entity_id)``.

Locks live in this process only. Running several workers needs optimistic
versioning in the database instead.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager

_registry_guard = threading.Lock()
_locks: dict[str, threading.RLock] = {}


def _lock_for(key: str) -> threading.RLock:
    with _registry_guard:
        lock = _locks.get(key)
        if lock is None:
            lock = _locks[key] = threading.RLock()
        return lock


@contextmanager
def hold(kind: str, entity_id: str) -> Iterator[None]:
    """Serialize work on one entity, e.g. ``with hold("order", order_id): ...``."""
    lock = _lock_for(f"{kind}:{entity_id}")
    with lock:
        yield


def reset_locks() -> None:
    with _registry_guard:
        _locks.clear()
