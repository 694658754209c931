"""Binary consensus encoding.

Values are written in a fixed, well-defined byte format that is suitable for
consensus-critical data: integers are little endian, sequences carry a ``u64``
length prefix, optionals a one byte flag, and tuples are plain concatenations.
"""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Generic, Optional, Sequence, TypeVar

T = TypeVar("T")


class DecodeError(Exception):
    """Raised when bytes cannot be decoded into the requested value."""


def read_exact(reader: BinaryIO, size: int) -> bytes:
    """Read exactly ``size`` bytes from ``reader`` or raise :class:`DecodeError`."""
    data = reader.read(size)
    if data is None or len(data) != size:
        got = 0 if data is None else len(data)
        raise DecodeError(f"unexpected end of data: wanted {size} bytes, got {got}")
    return bytes(data)


class Codec(ABC, Generic[T]):
    """Encodes values of one type to a writer and decodes them from a reader."""

    @abstractmethod
    def encode(self, value: T, writer: BinaryIO) -> int:
        """Write ``value`` and return the number of bytes written."""

    @abstractmethod
    def decode(self, reader: BinaryIO) -> T:
        """Read one value from ``reader``."""

    def to_bytes(self, value: T) -> bytes:
        buffer = io.BytesIO()
        self.encode(value, buffer)
        return buffer.getvalue()

    def from_bytes(self, data: bytes) -> T:
        return self.decode(io.BytesIO(data))


class IntCodec(Codec[int]):
    """Unsigned little-endian integer of a fixed bit width."""

    def __init__(self, bits: int) -> None:
        if bits not in (8, 16, 32, 64):
            raise ValueError(f"unsupported integer width: {bits}")
        self.bits = bits
        self.size = bits // 8

    def encode(self, value: int, writer: BinaryIO) -> int:
        if not 0 <= value < 1 << self.bits:
            raise ValueError(f"{value} does not fit in an unsigned {self.bits} bit integer")
        data = value.to_bytes(self.size, "little")
        writer.write(data)
        return len(data)

    def decode(self, reader: BinaryIO) -> int:
        return int.from_bytes(read_exact(reader, self.size), "little")

    def __repr__(self) -> str:
        return f"IntCodec({self.bits})"


U8 = IntCodec(8)
U16 = IntCodec(16)
U32 = IntCodec(32)
U64 = IntCodec(64)


class UnitCodec(Codec[None]):
    """The empty value: occupies no bytes."""

    def encode(self, value: None, writer: BinaryIO) -> int:
        return 0

    def decode(self, reader: BinaryIO) -> None:
        return None


class BytesCodec(Codec[bytes]):
    """Raw bytes: fixed ``size`` without prefix, or length-prefixed if ``size`` is None."""

    def __init__(self, size: Optional[int] = None) -> None:
        self.size = size

    def encode(self, value: bytes, writer: BinaryIO) -> int:
        data = bytes(value)
        written = 0
        if self.size is None:
            written += U64.encode(len(data), writer)
        elif len(data) != self.size:
            raise ValueError(f"expected {self.size} bytes, got {len(data)}")
        writer.write(data)
        return written + len(data)

    def decode(self, reader: BinaryIO) -> bytes:
        size = U64.decode(reader) if self.size is None else self.size
        return read_exact(reader, size)


class StringCodec(Codec[str]):
    """UTF-8 text with a ``u64`` length prefix."""

    _bytes = BytesCodec()

    def encode(self, value: str, writer: BinaryIO) -> int:
        return self._bytes.encode(value.encode("utf-8"), writer)

    def decode(self, reader: BinaryIO) -> str:
        data = self._bytes.decode(reader)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(str(exc)) from exc


class VecCodec(Codec[list]):
    """A list of items with a ``u64`` length prefix."""

    def __init__(self, item: Codec) -> None:
        self.item = item

    def encode(self, value: Sequence[Any], writer: BinaryIO) -> int:
        written = U64.encode(len(value), writer)
        return written + sum(self.item.encode(element, writer) for element in value)

    def decode(self, reader: BinaryIO) -> list:
        length = U64.decode(reader)
        return [self.item.decode(reader) for _ in range(length)]


class ArrayCodec(Codec[list]):
    """A fixed number of items without a length prefix."""

    def __init__(self, item: Codec, size: int) -> None:
        self.item = item
        self.size = size

    def encode(self, value: Sequence[Any], writer: BinaryIO) -> int:
        if len(value) != self.size:
            raise ValueError(f"expected {self.size} items, got {len(value)}")
        return sum(self.item.encode(element, writer) for element in value)

    def decode(self, reader: BinaryIO) -> list:
        return [self.item.decode(reader) for _ in range(self.size)]


class OptionCodec(Codec[Optional[Any]]):
    """An optional value: flag byte 0 for None, 1 followed by the value otherwise."""

    def __init__(self, item: Codec) -> None:
        self.item = item

    def encode(self, value: Optional[Any], writer: BinaryIO) -> int:
        if value is None:
            return U8.encode(0, writer)
        return U8.encode(1, writer) + self.item.encode(value, writer)

    def decode(self, reader: BinaryIO) -> Optional[Any]:
        flag = U8.decode(reader)
        if flag == 0:
            return None
        if flag == 1:
            return self.item.decode(reader)
        raise DecodeError("Invalid flag for option enum, expected 0 or 1")


class TupleCodec(Codec[tuple]):
    """A tuple whose elements are encoded one after another."""

    def __init__(self, *args: Codec) -> None:
        self.items = args

    def encode(self, value: Sequence[Any], writer: BinaryIO) -> int:
        if len(value) != len(self.items):
            raise ValueError(f"expected {len(self.items)} elements, got {len(value)}")
        return sum(codec.encode(element, writer) for codec, element in zip(self.items, value))

    def decode(self, reader: BinaryIO) -> tuple:
        return tuple(codec.decode(reader) for codec in self.items)