"""Codecs for user-defined record and variant types.

Records are dataclasses whose fields are declared with :func:`field`, naming
the codec of each field. The :func:`encodable` decorator builds a
:class:`StructCodec` for such a class and stores it as ``cls.codec``. Variant
types, sets of alternative records, are encoded by :class:`EnumCodec` as a
``u64`` variant index followed by the variant's own encoding.
"""

from __future__ import annotations

import dataclasses
import enum
import re
from typing import Any, BinaryIO, Dict, Iterable, List, Sequence, Tuple, Type

from .encoding import U64, Codec, DecodeError

_CODEC_KEY = "codec"


def field(codec: Codec, **kwargs: Any) -> Any:
    """Declare a dataclass field that is encoded with ``codec``."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[_CODEC_KEY] = codec
    return dataclasses.field(metadata=metadata, **kwargs)


class StructCodec(Codec[Any]):
    """Encodes the named fields of a record one after another."""

    def __init__(self, cls: Type[Any], fields: Iterable[Tuple[str, Codec]]) -> None:
        self.cls = cls
        self.fields = tuple(fields)

    def encode(self, value: Any, writer: BinaryIO) -> int:
        return sum(codec.encode(getattr(value, name), writer) for name, codec in self.fields)

    def decode(self, reader: BinaryIO) -> Any:
        values = {name: codec.decode(reader) for name, codec in self.fields}
        return self.cls(**values)

    def __repr__(self) -> str:
        return f"StructCodec({self.cls.__name__})"


def _codec_of(cls: Any) -> Codec:
    codec = getattr(cls, "codec", None)
    if not isinstance(codec, Codec):
        raise TypeError(f"{cls!r} has no codec; decorate it with @encodable")
    return codec


class EnumCodec(Codec[Any]):
    """Encodes one of several variant types, prefixed by its ``u64`` index.

    Each argument is either an ``@encodable`` class or a ``(cls, codec)`` pair.
    """

    def __init__(self, *args: Any) -> None:
        variants = []
        for arg in args:
            if isinstance(arg, tuple):
                cls, codec = arg
            else:
                cls, codec = arg, _codec_of(arg)
            variants.append((cls, codec))
        self.variants: Tuple[Tuple[Type[Any], Codec], ...] = tuple(variants)

    def encode(self, value: Any, writer: BinaryIO) -> int:
        for index, (cls, codec) in enumerate(self.variants):
            if type(value) is cls:
                return U64.encode(index, writer) + codec.encode(value, writer)
        raise TypeError(f"{type(value).__name__} is not a variant of this enum")

    def decode(self, reader: BinaryIO) -> Any:
        index = U64.decode(reader)
        if index >= len(self.variants):
            raise DecodeError("invalid enum variant")
        return self.variants[index][1].decode(reader)


class _EnumMemberCodec(Codec[Any]):
    """Encodes the members of a plain ``enum.Enum`` by their declaration index."""

    def __init__(self, cls: Type[enum.Enum]) -> None:
        self.members = list(cls)

    def encode(self, value: Any, writer: BinaryIO) -> int:
        try:
            index = self.members.index(value)
        except ValueError:
            raise TypeError(f"{value!r} is not a member of this enum") from None
        return U64.encode(index, writer)

    def decode(self, reader: BinaryIO) -> Any:
        index = U64.decode(reader)
        if index >= len(self.members):
            raise DecodeError("invalid enum variant")
        return self.members[index]


def encodable(cls: Type[Any]) -> Type[Any]:
    """Attach a codec to ``cls`` as ``cls.codec``.

    Plain enumerations are encoded by member index. Any other class is made a
    dataclass if it is not one already, and every field must name its codec.
    """
    if isinstance(cls, type) and issubclass(cls, enum.Enum):
        cls.codec = _EnumMemberCodec(cls)
        return cls
    if not dataclasses.is_dataclass(cls):
        cls = dataclasses.dataclass(cls)
    fields: List[Tuple[str, Codec]] = []
    for item in dataclasses.fields(cls):
        codec = item.metadata.get(_CODEC_KEY)
        if codec is None:
            raise TypeError(f"field {item.name!r} of {cls.__name__} has no codec")
        fields.append((item.name, codec))
    cls.codec = StructCodec(cls, fields)
    return cls


def _snake_case(name: str) -> str:
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    return name.lower()


def unzip_consensus(
    items: Iterable[Tuple[Any, Any]], variants: Sequence[Type[Any]]
) -> Dict[str, List[Tuple[Any, Any]]]:
    """Split ``(peer, item)`` pairs by variant.

    Every variant must be a dataclass with exactly one field. The result maps
    the snake-case name of each variant to the ``(peer, inner value)`` pairs
    of that variant, in input order.
    """
    slots: Dict[Type[Any], Tuple[str, str]] = {}
    for cls in variants:
        fields = dataclasses.fields(cls) if dataclasses.is_dataclass(cls) else ()
        if len(fields) != 1:
            raise TypeError("UnzipConsensus only supports 1-tuple variants")
        slots[cls] = (_snake_case(cls.__name__), fields[0].name)

    result: Dict[str, List[Tuple[Any, Any]]] = {name: [] for name, _ in slots.values()}
    for peer, item in items:
        try:
            name, attr = slots[type(item)]
        except KeyError:
            raise TypeError(f"{type(item).__name__} is not one of the given variants") from None
        result[name].append((peer, getattr(item, attr)))
    return result