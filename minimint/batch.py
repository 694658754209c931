"""Accumulation of database operations with transactional rollback.

An :class:`Accumulator` collects items; an :class:`AccumulatorTx` appends to
it and, unless committed, resets it to the state it had when the transaction
started. Used as a context manager, a transaction that is left without
:meth:`AccumulatorTx.commit` being called is rolled back automatically.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Iterator, List, Optional, TypeVar

T = TypeVar("T")


class BatchItemKind(enum.Enum):
    """The kind of a database operation."""

    INSERT_NEW = "insert_new"
    """Insert an element that is expected not to exist yet."""
    INSERT = "insert"
    """Insert an element, replacing any existing one."""
    DELETE = "delete"
    """Delete an element that is expected to exist."""
    MAYBE_DELETE = "maybe_delete"
    """Delete an element if it exists."""


@dataclass(frozen=True)
class Element:
    """A database key-value pair."""

    key: Any
    value: Any


@dataclass(frozen=True)
class BatchItem:
    """A single database operation."""

    kind: BatchItemKind
    key: Any
    value: Any = None

    @property
    def element(self) -> Optional[Element]:
        """The key-value pair of an insert, or None for deletions."""
        if self.kind in (BatchItemKind.INSERT_NEW, BatchItemKind.INSERT):
            return Element(self.key, self.value)
        return None

    @classmethod
    def insert_new(cls, key: Any, value: Any) -> BatchItem:
        return cls(BatchItemKind.INSERT_NEW, key, value)

    @classmethod
    def insert(cls, key: Any, value: Any) -> BatchItem:
        return cls(BatchItemKind.INSERT, key, value)

    @classmethod
    def delete(cls, key: Any) -> BatchItem:
        return cls(BatchItemKind.DELETE, key)

    @classmethod
    def maybe_delete(cls, key: Any) -> BatchItem:
        return cls(BatchItemKind.MAYBE_DELETE, key)


class Accumulator(Generic[T]):
    """Collects items over its lifetime; changes are made through transactions."""

    def __init__(self, items: Iterable[T] = ()) -> None:
        self._buffer: List[T] = list(items)

    def transaction(self) -> AccumulatorTx[T]:
        """Start a transaction that rolls back unless committed."""
        return AccumulatorTx(self)

    def autocommit(self, func: Callable[[AccumulatorTx[T]], Any]) -> None:
        """Run ``func`` in a transaction and commit it if ``func`` returns normally."""
        with self.transaction() as tx:
            func(tx)
            tx.commit()

    def copy(self) -> Accumulator[T]:
        return Accumulator(self._buffer)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._buffer))

    def __len__(self) -> int:
        return len(self._buffer)

    def __repr__(self) -> str:
        return f"Accumulator({self._buffer!r})"


DbBatch = Accumulator


class AccumulatorTx(Generic[T]):
    """A transaction on an :class:`Accumulator`."""

    def __init__(self, accumulator: Accumulator[T]) -> None:
        self._accumulator = accumulator
        self._checkpoint = len(accumulator._buffer)
        self._open = True

    def _ensure_open(self) -> None:
        if not self._open:
            raise RuntimeError("transaction is already finished")

    @property
    def is_open(self) -> bool:
        return self._open

    def commit(self) -> None:
        """Keep everything appended in this transaction."""
        self._ensure_open()
        self._open = False

    def rollback(self) -> None:
        """Reset the accumulator to the state at the start of this transaction."""
        self._ensure_open()
        del self._accumulator._buffer[self._checkpoint :]
        self._open = False

    def append(self, item: T) -> None:
        self._ensure_open()
        self._accumulator._buffer.append(item)

    def extend(self, items: Iterable[T]) -> None:
        self._ensure_open()
        self._accumulator._buffer.extend(items)

    def subtransaction(self) -> AccumulatorTx[T]:
        """Start a nested transaction.

        Rolling it back only resets this transaction to where the nested one
        began; committing it makes its items part of this transaction, which
        may itself still be rolled back.
        """
        self._ensure_open()
        return AccumulatorTx(self._accumulator)

    def append_from_accumulators(self, accumulators: Iterable[Accumulator[T]]) -> None:
        """Append the items of several accumulators in order."""
        self.extend(item for accumulator in accumulators for item in accumulator)

    def append_insert_new(self, key: Any, value: Any) -> None:
        self.append(BatchItem.insert_new(key, value))

    def append_insert(self, key: Any, value: Any) -> None:
        self.append(BatchItem.insert(key, value))

    def append_delete(self, key: Any) -> None:
        self.append(BatchItem.delete(key))

    def append_maybe_delete(self, key: Any) -> None:
        self.append(BatchItem.maybe_delete(key))

    def __enter__(self) -> AccumulatorTx[T]:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if self._open:
            self.rollback()