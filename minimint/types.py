"""Basic value types: amounts, peer ids, transaction ids and out points."""

from __future__ import annotations

import decimal
import enum
import hashlib
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar

from .derive import encodable, field
from .encoding import U16, U64, BytesCodec

_U64_MAX = (1 << 64) - 1
_MAX_SATS = 2_100_000_000_000_000


class ParseAmountError(ValueError):
    """Raised when text cannot be parsed into an :class:`Amount`."""


class Denomination(enum.Enum):
    """Units in which bitcoin amounts may be written."""

    BITCOIN = "BTC"
    CENTI_BITCOIN = "cBTC"
    MILLI_BITCOIN = "mBTC"
    MICRO_BITCOIN = "uBTC"
    NANO_BITCOIN = "nBTC"
    PICO_BITCOIN = "pBTC"
    BIT = "bits"
    SATOSHI = "satoshi"
    MILLI_SATOSHI = "msat"


_SATS_PER_UNIT = {
    Denomination.BITCOIN: Decimal(10) ** 8,
    Denomination.CENTI_BITCOIN: Decimal(10) ** 6,
    Denomination.MILLI_BITCOIN: Decimal(10) ** 5,
    Denomination.MICRO_BITCOIN: Decimal(10) ** 2,
    Denomination.NANO_BITCOIN: Decimal(10) ** -1,
    Denomination.PICO_BITCOIN: Decimal(10) ** -4,
    Denomination.BIT: Decimal(10) ** 2,
    Denomination.SATOSHI: Decimal(1),
}

_INTEGER = re.compile(r"\+?[0-9]+")
_DECIMAL = re.compile(r"[0-9]*\.?[0-9]*")


@encodable
@dataclass(frozen=True, order=True)
class Amount:
    """An amount of BTC inside the system, counted in milli satoshi."""

    milli_sat: int = field(U64)

    ZERO: ClassVar[Amount]

    def __post_init__(self) -> None:
        if not 0 <= self.milli_sat <= _U64_MAX:
            raise OverflowError(f"amount out of range: {self.milli_sat} msat")

    @classmethod
    def from_msat(cls, msat: int) -> Amount:
        return cls(msat)

    @classmethod
    def from_sat(cls, sat: int) -> Amount:
        return cls(sat * 1000)

    @classmethod
    def from_str(cls, s: str) -> Amount:
        """Parse a whole number of milli satoshi."""
        if not s:
            raise ParseAmountError(
                "Error parsing string as integer: cannot parse integer from empty string"
            )
        if not _INTEGER.fullmatch(s):
            raise ParseAmountError("Error parsing string as integer: invalid digit found in string")
        value = int(s)
        if value > _U64_MAX:
            raise ParseAmountError(
                "Error parsing string as integer: number too large to fit in target type"
            )
        return cls(value)

    @classmethod
    def from_str_in(cls, s: str, denom: Denomination) -> Amount:
        """Parse a decimal amount written in ``denom``."""
        if denom is Denomination.MILLI_SATOSHI:
            return cls.from_str(s)
        prefix = "Error parsing string as a bitcoin amount: "
        if s.startswith("-"):
            raise ParseAmountError(prefix + "amount is negative")
        if not _DECIMAL.fullmatch(s) or not any(char.isdigit() for char in s):
            raise ParseAmountError(prefix + "invalid number format")
        with decimal.localcontext() as context:
            context.prec = 100
            sats = Decimal(s) * _SATS_PER_UNIT[denom]
            if sats != sats.to_integral_value():
                raise ParseAmountError(prefix + "amount has a too high precision")
        value = int(sats)
        if value > _U64_MAX:
            raise ParseAmountError(prefix + "amount is too big")
        if value > _MAX_SATS:
            raise ParseAmountError(prefix + "amount exceeds the total bitcoin supply")
        return cls.from_sat(value)

    def saturating_sub(self, other: Amount) -> Amount:
        return Amount(max(self.milli_sat - other.milli_sat, 0))

    def __add__(self, other: object) -> Amount:
        if not isinstance(other, Amount):
            return NotImplemented
        return Amount(self.milli_sat + other.milli_sat)

    def __radd__(self, other: object) -> Amount:
        if isinstance(other, int) and other == 0:
            return self
        return NotImplemented

    def __sub__(self, other: object) -> Amount:
        if not isinstance(other, Amount):
            return NotImplemented
        return Amount(self.milli_sat - other.milli_sat)

    def __mul__(self, other: object) -> Amount:
        if not isinstance(other, int) or isinstance(other, bool):
            return NotImplemented
        return Amount(self.milli_sat * other)

    __rmul__ = __mul__

    def __mod__(self, other: object) -> Amount:
        if not isinstance(other, Amount):
            return NotImplemented
        return Amount(self.milli_sat % other.milli_sat)

    def __floordiv__(self, other: object) -> int:
        if not isinstance(other, Amount):
            return NotImplemented
        return self.milli_sat // other.milli_sat

    def __str__(self) -> str:
        return f"{self.milli_sat} msat"


Amount.ZERO = Amount(0)


@encodable
@dataclass(frozen=True, order=True)
class PeerId:
    """Identifier of a federation member."""

    value: int = field(U16)

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 0xFFFF:
            raise OverflowError(f"peer id out of range: {self.value}")

    def to_usize(self) -> int:
        return self.value

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return str(self.value)


@encodable
@dataclass(frozen=True, order=True)
class TransactionId:
    """A SHA-256 transaction id for peg-ins, peg-outs and reissuances."""

    data: bytes = field(BytesCodec(32))

    def __post_init__(self) -> None:
        if len(self.data) != 32:
            raise ValueError(f"transaction id must be 32 bytes, got {len(self.data)}")
        object.__setattr__(self, "data", bytes(self.data))

    @classmethod
    def from_data(cls, data: bytes) -> TransactionId:
        """Hash ``data`` with SHA-256 into a transaction id."""
        return cls(hashlib.sha256(bytes(data)).digest())

    @classmethod
    def from_hex(cls, text: str) -> TransactionId:
        try:
            raw = bytes.fromhex(text)
        except ValueError as exc:
            raise ValueError(f"invalid hex transaction id: {text!r}") from exc
        return cls(raw)

    def __bytes__(self) -> bytes:
        return self.data

    def __str__(self) -> str:
        return self.data.hex()


@encodable
@dataclass(frozen=True)
class OutPoint:
    """Refers to one output of a transaction."""

    txid: TransactionId = field(TransactionId.codec)
    out_idx: int = field(U64)

    def __str__(self) -> str:
        return f"{self.txid}:{self.out_idx}"