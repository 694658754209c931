"""Federation-wide configuration pieces and core errors."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Union

from .types import Amount


class CoreError(Exception):
    """Base error for querying transaction outcomes."""

    def is_retryable(self) -> bool:
        """Whether the queried outcome may become ready later."""
        return False


class MismatchingVariant(CoreError):
    """The outcome had a different variant than was asked for."""

    def __init__(self, expected: str, got: str) -> None:
        super().__init__(f"Mismatching outcome variant: expected {expected}, got {got}")
        self.expected = expected
        self.got = got


class PendingPreimage(CoreError):
    """The preimage is still being decrypted."""

    def __init__(self) -> None:
        super().__init__("Pending preimage decryption")

    def is_retryable(self) -> bool:
        return True


@dataclass(frozen=True)
class FeeConsensus:
    """Fees charged for transaction inputs and outputs."""

    fee_coin_spend_abs: Amount
    fee_peg_in_abs: Amount
    fee_coin_issuance_abs: Amount
    fee_peg_out_abs: Amount
    fee_contract_input: Amount
    fee_contract_output: Amount

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FeeConsensus:
        """Build from a mapping of field names to amounts in milli satoshi."""
        values: Dict[str, Amount] = {}
        for item in fields(cls):
            if item.name not in data:
                raise ValueError(f"missing field `{item.name}`")
            raw = data[item.name]
            if not isinstance(raw, int) or isinstance(raw, bool):
                raise ValueError(f"field `{item.name}` must be an integer, got {raw!r}")
            values[item.name] = Amount.from_msat(raw)
        return cls(**values)

    def to_dict(self) -> Dict[str, int]:
        return {item.name: getattr(self, item.name).milli_sat for item in fields(self)}


def load_from_file(path: Union[str, "os.PathLike[str]"]) -> Any:
    """Read and parse a JSON configuration file."""
    with open(path, encoding="utf-8") as handle:
        try:
            return json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Could not parse cfg file: {exc}") from exc