"""Key-value persistence for deep-link state.

The store collaborator is anything with ``get``/``set``/``remove`` over
string keys and string values (sync or async). Every call made by
waypoint goes through the helpers at the bottom of this module, which
turn collaborator failures into a ``StorageResult`` instead of raising.

Backends:

- ``MemoryStore`` — a dict, for tests and ephemeral processes.
- ``SqliteStore`` — one ``kv`` table; blocking sqlite3 calls run in an
  anyio worker thread.
"""

import json
import logging
import sqlite3
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol

import anyio

from waypoint._internal.invoke import invoke
from waypoint.errors import StorageError

logger = logging.getLogger("waypoint.storage")


class KeyValueStore(Protocol):
    """Protocol for the persistent storage collaborator.

    Methods may be plain or ``async``; waypoint awaits either.
    """

    def get(self, key: str) -> str | None | Awaitable[str | None]: ...

    def set(self, key: str, value: str) -> None | Awaitable[None]: ...

    def remove(self, key: str) -> None | Awaitable[None]: ...


@dataclass(frozen=True, slots=True)
class StorageResult:
    """The outcome of a storage operation.

    Falsy on failure, so callers that treat failure as ignorable can write::

        result = await save_json(store, key, data)
        if not result:
            logger.warning("...: %s", result.error)
    """

    value: Any = None
    error: StorageError | None = None

    @property
    def ok(self) -> bool:
        """True if the operation succeeded."""
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------


class MemoryStore:
    """In-process dict-backed store."""

    __slots__ = ("_data",)

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        """Stored keys, sorted."""
        return sorted(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)


def _run_sync(func: Callable[..., Any], *args: Any) -> Any:
    """Run blocking call in anyio worker thread."""
    return anyio.to_thread.run_sync(func, *args)


class SqliteStore:
    """SQLite-backed store with a single ``kv`` table.

    Uses ``check_same_thread=False`` because ``anyio.to_thread`` dispatches
    to a pool and consecutive calls may land on different threads.

    Usage::

        store = await SqliteStore.open("links.db")
        await store.set("auth_token", "abc")
        await store.close()
    """

    __slots__ = ("_conn",)

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    @classmethod
    async def open(cls, path: str) -> "SqliteStore":
        """Open (and create if needed) a store at *path*."""

        def _connect() -> sqlite3.Connection:
            conn = sqlite3.connect(path, autocommit=True, check_same_thread=False)
            conn.execute("CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)")
            return conn

        return cls(await _run_sync(_connect))

    async def get(self, key: str) -> str | None:
        def _get() -> str | None:
            row = self._conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return row[0] if row else None

        return await _run_sync(_get)

    async def set(self, key: str, value: str) -> None:
        await _run_sync(
            lambda: self._conn.execute(
                "INSERT INTO kv (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )
        )

    async def remove(self, key: str) -> None:
        await _run_sync(lambda: self._conn.execute("DELETE FROM kv WHERE key = ?", (key,)))

    async def close(self) -> None:
        await _run_sync(self._conn.close)


# ---------------------------------------------------------------------------
# Fallible helpers
# ---------------------------------------------------------------------------


async def load_json(store: KeyValueStore, key: str) -> StorageResult:
    """Read and decode the JSON value at *key*.

    A missing key is a successful result with ``value=None``. Read errors
    and undecodable values are failures.
    """
    try:
        raw = await invoke(store.get, key)
    except Exception as exc:
        return StorageResult(error=StorageError("get", key, exc))
    if raw is None:
        return StorageResult()
    try:
        return StorageResult(value=json.loads(raw))
    except (TypeError, ValueError) as exc:
        return StorageResult(error=StorageError("decode", key, exc))


async def save_json(store: KeyValueStore, key: str, value: Any) -> StorageResult:
    """Encode *value* as JSON and write it to *key* (overwrites)."""
    try:
        await invoke(store.set, key, json.dumps(value))
    except Exception as exc:
        return StorageResult(error=StorageError("set", key, exc))
    return StorageResult(value=value)


async def load_text(store: KeyValueStore, key: str) -> StorageResult:
    """Read the raw string at *key*."""
    try:
        return StorageResult(value=await invoke(store.get, key))
    except Exception as exc:
        return StorageResult(error=StorageError("get", key, exc))


async def delete_key(store: KeyValueStore, key: str) -> StorageResult:
    """Remove *key*. Removing a missing key succeeds."""
    try:
        await invoke(store.remove, key)
    except Exception as exc:
        return StorageResult(error=StorageError("remove", key, exc))
    return StorageResult()
