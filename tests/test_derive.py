import enum
import io
from dataclasses import dataclass
from typing import NamedTuple, Optional

import pytest

from minimint.derive import EnumCodec, StructCodec, encodable, field, unzip_consensus
from minimint.encoding import U8, U32, U64, DecodeError, OptionCodec, VecCodec


def roundtrip_expected(codec, value, expected):
    buffer = io.BytesIO()
    length = codec.encode(value, buffer)
    assert length == len(buffer.getvalue())
    assert buffer.getvalue() == bytes(expected)

    reader = io.BytesIO(buffer.getvalue())
    decoded = codec.decode(reader)
    assert decoded == value
    assert reader.tell() == length


@dataclass
class SampleStruct:
    vec: list = field(VecCodec(U8))
    num: int = field(U32)


SampleStruct = encodable(SampleStruct)


class SamplePair(NamedTuple):
    vec: list
    num: int


@dataclass
class Foo:
    value: Optional[int] = field(OptionCodec(U64))


Foo = encodable(Foo)


@dataclass
class Bar:
    bazz: list = field(VecCodec(U8))


Bar = encodable(Bar)


SAMPLE_ENUM = EnumCodec(Foo, Bar)


def test_derive_struct():
    reference = SampleStruct(vec=[1, 2, 3], num=42)
    expected = [3, 0, 0, 0, 0, 0, 0, 0, 1, 2, 3, 42, 0, 0, 0]
    roundtrip_expected(SampleStruct.codec, reference, expected)

    explicit = StructCodec(SampleStruct, [("vec", VecCodec(U8)), ("num", U32)])
    assert explicit.to_bytes(reference) == bytes(expected)


def test_derive_tuple_struct():
    codec = StructCodec(SamplePair, [("vec", VecCodec(U8)), ("num", U32)])
    reference = SamplePair([1, 2, 3], 42)
    expected = [3, 0, 0, 0, 0, 0, 0, 0, 1, 2, 3, 42, 0, 0, 0]
    roundtrip_expected(codec, reference, expected)


@pytest.mark.parametrize(
    "reference, expected",
    [
        (Foo(42), [0, 0, 0, 0, 0, 0, 0, 0, 1, 42, 0, 0, 0, 0, 0, 0, 0]),
        (Foo(None), [0, 0, 0, 0, 0, 0, 0, 0, 0]),
        (Bar([1, 2, 3]), [1, 0, 0, 0, 0, 0, 0, 0, 3, 0, 0, 0, 0, 0, 0, 0, 1, 2, 3]),
    ],
)
def test_derive_enum(reference, expected):
    roundtrip_expected(SAMPLE_ENUM, reference, expected)


def test_enum_rejects_unknown_variant_index():
    with pytest.raises(DecodeError):
        SAMPLE_ENUM.from_bytes(bytes([2, 0, 0, 0, 0, 0, 0, 0]))


def test_enum_rejects_foreign_value():
    with pytest.raises(TypeError):
        SAMPLE_ENUM.to_bytes(SampleStruct([], 0))


def test_enum_accepts_explicit_pairs():
    codec = EnumCodec((SamplePair, StructCodec(SamplePair, [("vec", VecCodec(U8)), ("num", U32)])))
    value = SamplePair([9], 7)
    assert codec.from_bytes(codec.to_bytes(value)) == value


def test_encodable_plain_enum():
    class Colour(enum.Enum):
        RED = "red"
        GREEN = "green"

    colour_cls = encodable(Colour)
    codec = colour_cls.codec

    assert codec.to_bytes(colour_cls.GREEN) == bytes([1, 0, 0, 0, 0, 0, 0, 0])
    assert codec.from_bytes(codec.to_bytes(colour_cls.RED)) is colour_cls.RED
    with pytest.raises(DecodeError):
        codec.from_bytes(bytes([5, 0, 0, 0, 0, 0, 0, 0]))


def test_encodable_requires_codec_per_field():
    @dataclass
    class Missing:
        value: int

    with pytest.raises(TypeError):
        encodable(Missing)


def test_encodable_makes_dataclass():
    class Plain:
        num: int = field(U8)

    plain_cls = encodable(Plain)
    assert plain_cls.codec.from_bytes(bytes([5])) == plain_cls(5)


def test_truncated_struct_raises():
    codec = StructCodec(SampleStruct, [("vec", VecCodec(U8)), ("num", U32)])
    with pytest.raises(DecodeError):
        codec.from_bytes(bytes([3, 0, 0, 0, 0, 0, 0, 0, 1, 2]))


@dataclass
class PegOutSignature:
    sig: str


@dataclass
class LN:
    share: int


def test_unzip_consensus_groups_by_variant():
    items = [(0, LN(1)), (1, PegOutSignature("a")), (2, LN(3))]
    result = unzip_consensus(items, [PegOutSignature, LN])
    assert result == {"peg_out_signature": [(1, "a")], "ln": [(0, 1), (2, 3)]}


def test_unzip_consensus_empty_input():
    assert unzip_consensus([], [LN]) == {"ln": []}


def test_unzip_consensus_rejects_multi_field_variants():
    with pytest.raises(TypeError):
        unzip_consensus([], [SampleStruct])


def test_unzip_consensus_rejects_unknown_item():
    with pytest.raises(TypeError):
        unzip_consensus([(0, Bar([]))], [LN])