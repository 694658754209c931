"""Typed key-value database interface on top of raw byte storage.

Keys are :class:`DbKey` subclasses: encodable records whose class declares a
one byte ``DB_PREFIX`` and the ``VALUE`` type stored under them. A key's bytes
are its prefix followed by its consensus encoding. A key class may also serve
as a prefix for searching: it then names the ``KEY`` type of the entries it
finds, which defaults to the class itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Iterator, Optional, Tuple, Type

from .batch import Accumulator, BatchItem
from .encoding import Codec, DecodeError


class DecodingError(Exception):
    """Raised when stored bytes cannot be turned back into a key or value."""


class WrongPrefix(DecodingError):
    """The key bytes start with a different prefix than the key type uses."""

    def __init__(self, expected: int, found: int) -> None:
        super().__init__(f"Key had a wrong prefix, expected {expected} but got {found}")
        self.expected = expected
        self.found = found


class WrongLength(DecodingError):
    """The key bytes have the wrong length."""

    def __init__(self, expected: int, found: int) -> None:
        super().__init__(f"Key had a wrong length, expected {expected} but got {found}")
        self.expected = expected
        self.found = found


class OtherDecodingError(DecodingError):
    """Any other failure to decode stored bytes."""

    def __init__(self, cause: Any) -> None:
        super().__init__(f"Other decoding error: {cause}")
        self.cause = cause


def _codec_of(cls: Type[Any]) -> Codec:
    codec = getattr(cls, "codec", None)
    if not isinstance(codec, Codec):
        raise TypeError(f"{cls.__name__} has no codec; decorate it with @encodable")
    return codec


class DbKey:
    """Base class for database keys and key prefixes."""

    DB_PREFIX: ClassVar[int]
    KEY: ClassVar[Type[Any]]
    VALUE: ClassVar[Type[Any]]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "KEY" not in cls.__dict__:
            cls.KEY = cls

    def to_bytes(self) -> bytes:
        """The prefix byte followed by the key's encoding."""
        return bytes([self.DB_PREFIX]) + _codec_of(type(self)).to_bytes(self)

    @classmethod
    def from_bytes(cls, data: bytes) -> Any:
        """Decode a key of this class from its stored bytes."""
        if not data:
            raise WrongLength(1, 0)
        if data[0] != cls.DB_PREFIX:
            raise WrongPrefix(cls.DB_PREFIX, data[0])
        try:
            return _codec_of(cls).from_bytes(bytes(data[1:]))
        except DecodeError as exc:
            raise OtherDecodingError(exc) from exc


def value_to_bytes(value: Any) -> bytes:
    """Encode a stored value with the codec of its type."""
    return _codec_of(type(value)).to_bytes(value)


def value_from_bytes(cls: Type[Any], data: bytes) -> Any:
    """Decode a value of type ``cls`` from stored bytes."""
    try:
        return _codec_of(cls).from_bytes(bytes(data))
    except DecodeError as exc:
        raise OtherDecodingError(exc) from exc


class Database(ABC):
    """A byte-oriented key-value store with typed helpers."""

    @abstractmethod
    def raw_insert_entry(self, key: bytes, value: bytes) -> Optional[bytes]:
        """Store ``value`` under ``key`` and return the previous value, if any."""

    @abstractmethod
    def raw_get_value(self, key: bytes) -> Optional[bytes]:
        """Return the value stored under ``key``, or None."""

    @abstractmethod
    def raw_remove_entry(self, key: bytes) -> Optional[bytes]:
        """Remove ``key`` and return its value, or None if it was absent."""

    @abstractmethod
    def raw_find_by_prefix(self, key_prefix: bytes) -> Iterator[Tuple[bytes, bytes]]:
        """Iterate over all entries whose key starts with ``key_prefix``, in key order."""

    @abstractmethod
    def raw_apply_batch(self, batch: Accumulator[BatchItem]) -> None:
        """Apply all operations of ``batch``."""

    def insert_entry(self, key: DbKey, value: Any) -> Optional[Any]:
        old = self.raw_insert_entry(key.to_bytes(), value_to_bytes(value))
        return None if old is None else value_from_bytes(type(key).VALUE, old)

    def get_value(self, key: DbKey) -> Optional[Any]:
        data = self.raw_get_value(key.to_bytes())
        return None if data is None else value_from_bytes(type(key).VALUE, data)

    def remove_entry(self, key: DbKey) -> Optional[Any]:
        data = self.raw_remove_entry(key.to_bytes())
        return None if data is None else value_from_bytes(type(key).VALUE, data)

    def find_by_prefix(self, key_prefix: DbKey) -> Iterator[Tuple[Any, Any]]:
        """Yield decoded ``(key, value)`` pairs of all entries under ``key_prefix``."""
        prefix_cls = type(key_prefix)
        for key_bytes, value_bytes in self.raw_find_by_prefix(key_prefix.to_bytes()):
            key = prefix_cls.KEY.from_bytes(key_bytes)
            value = value_from_bytes(prefix_cls.VALUE, value_bytes)
            yield key, value

    def apply_batch(self, batch: Accumulator[BatchItem]) -> None:
        self.raw_apply_batch(batch)