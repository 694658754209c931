"""An in-memory database, mainly for tests."""

from __future__ import annotations

import logging
import sys
import threading
from typing import Dict, Iterator, Optional, Tuple

from .batch import Accumulator, BatchItem, BatchItemKind
from .db import Database, value_to_bytes

logger = logging.getLogger(__name__)


class MemDatabase(Database):
    """A thread-safe database that keeps all entries in memory."""

    def __init__(self) -> None:
        self._data: Dict[bytes, bytes] = {}
        self._lock = threading.Lock()

    def raw_insert_entry(self, key: bytes, value: bytes) -> Optional[bytes]:
        with self._lock:
            old = self._data.get(bytes(key))
            self._data[bytes(key)] = bytes(value)
            return old

    def raw_get_value(self, key: bytes) -> Optional[bytes]:
        with self._lock:
            return self._data.get(bytes(key))

    def raw_remove_entry(self, key: bytes) -> Optional[bytes]:
        with self._lock:
            return self._data.pop(bytes(key), None)

    def raw_find_by_prefix(self, key_prefix: bytes) -> Iterator[Tuple[bytes, bytes]]:
        prefix = bytes(key_prefix)
        with self._lock:
            matches = sorted(
                (key, value) for key, value in self._data.items() if key.startswith(prefix)
            )
        return iter(matches)

    def raw_apply_batch(self, batch: Accumulator[BatchItem]) -> None:
        for item in batch:
            key_bytes = item.key.to_bytes()
            if item.kind is BatchItemKind.INSERT_NEW:
                if self.raw_insert_entry(key_bytes, value_to_bytes(item.value)) is not None:
                    logger.error("Database replaced element! This should not happen!")
                    logger.debug("Problematic key: %r", item.key)
            elif item.kind is BatchItemKind.INSERT:
                self.raw_insert_entry(key_bytes, value_to_bytes(item.value))
            elif item.kind is BatchItemKind.DELETE:
                if self.raw_remove_entry(key_bytes) is None:
                    logger.error("Database deleted absent element! This should not happen!")
                    logger.debug("Problematic key: %r", item.key)
            else:
                self.raw_remove_entry(key_bytes)

    def dump_db(self) -> None:
        """Write every entry as ``key: value`` in hex, in key order, to standard error."""
        with self._lock:
            entries = sorted(self._data.items())
        for key, value in entries:
            print(f"{key.hex()}: {value.hex()}", file=sys.stderr)