"""Per-scope cache of metadata and binary placeholders.

Enumeration registers one entry per document; the following metadata and
binary fetches remove the entry as they read it. Scopes are keyed by the
configured source path so separate enumerations never share a lock.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, Generic, Set, TypeVar

from fsconnector.models import Metadata

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class DocumentNotCachedError(KeyError):
    """Raised when a document has no (or no longer has a) cache entry."""

    def __init__(self, scope: str, doc_id: str, kind: str) -> None:
        super().__init__(f"No cached {kind} for {doc_id} in {scope}")
        self.scope = scope
        self.doc_id = doc_id
        self.kind = kind

    def __str__(self) -> str:
        return self.args[0]


@dataclass(frozen=True, slots=True)
class LazyBinary:
    """Placeholder for document content that is opened on first use."""

    path: Path

    def open(self) -> BinaryIO:
        return self.path.open("rb")


class _Scope(Generic[T]):
    __slots__ = ("lock", "entries")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.entries: Dict[str, T] = {}


class _ScopedStore(Generic[T]):
    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._lock = threading.Lock()
        self._scopes: Dict[str, _Scope[T]] = {}

    def put(self, scope: str, doc_id: str, payload: T) -> None:
        while True:
            with self._lock:
                bucket = self._scopes.setdefault(scope, _Scope())
            with bucket.lock:
                # a concurrent pop may have retired this bucket
                if self._scopes.get(scope) is bucket:
                    bucket.entries[doc_id] = payload
                    return

    def pop(self, scope: str, doc_id: str) -> T:
        with self._lock:
            bucket = self._scopes.get(scope)
        if bucket is None:
            raise DocumentNotCachedError(scope, doc_id, self.kind)
        with bucket.lock:
            try:
                payload = bucket.entries.pop(doc_id)
            except KeyError:
                raise DocumentNotCachedError(scope, doc_id, self.kind) from None
            if not bucket.entries:
                with self._lock:
                    if self._scopes.get(scope) is bucket:
                        del self._scopes[scope]
            return payload

    def size(self, scope: str) -> int:
        with self._lock:
            bucket = self._scopes.get(scope)
        if bucket is None:
            return 0
        with bucket.lock:
            return len(bucket.entries)

    def scopes(self) -> Set[str]:
        with self._lock:
            return set(self._scopes)

    def clear(self, scope: str) -> None:
        with self._lock:
            self._scopes.pop(scope, None)


class DocumentCache:
    """Shared store consumed by the caching reader."""

    def __init__(self) -> None:
        self._metadata: _ScopedStore[Metadata] = _ScopedStore("metadata")
        self._binaries: _ScopedStore[LazyBinary] = _ScopedStore("binary")

    def put_metadata(self, scope: str, doc_id: str, metadata: Metadata) -> None:
        self._metadata.put(scope, doc_id, metadata)

    def put_binary(self, scope: str, doc_id: str, binary: LazyBinary) -> None:
        self._binaries.put(scope, doc_id, binary)

    def pop_metadata(self, scope: str, doc_id: str) -> Metadata:
        return self._metadata.pop(scope, doc_id)

    def pop_binary(self, scope: str, doc_id: str) -> LazyBinary:
        return self._binaries.pop(scope, doc_id)

    def pending(self, scope: str) -> tuple[int, int]:
        """Number of unread (metadata, binary) entries in ``scope``."""
        return self._metadata.size(scope), self._binaries.size(scope)

    def active_scopes(self) -> Set[str]:
        """Scopes that still hold unread entries."""
        return self._metadata.scopes() | self._binaries.scopes()

    def clear(self, scope: str) -> None:
        LOGGER.debug("Clearing cached entries for %s", scope)
        self._metadata.clear(scope)
        self._binaries.clear(scope)
