# minimint

Building blocks for a federated e-cash mint, in pure Python with no runtime
dependencies.

## Modules

- `minimint.encoding`: a binary encoding for consensus data. Integers are
  unsigned and little-endian (`IntCodec`, with the ready-made `U8`, `U16`,
  `U32` and `U64`). Byte strings (`BytesCodec`), UTF-8 strings (`StringCodec`)
  and lists (`VecCodec`) carry a `u64` length prefix. A fixed-size
  `BytesCodec(size)` or `ArrayCodec` has no prefix. `OptionCodec` writes a
  flag byte, 0 or 1. `TupleCodec` concatenates its elements. `UnitCodec`
  writes nothing. Every `Codec` has `encode`, `decode`, `to_bytes` and
  `from_bytes`. Malformed or truncated input raises `DecodeError`, and
  `read_exact` reads an exact number of bytes or raises it.
- `minimint.derive`: `field(codec)` names the codec of a dataclass field.
  `@encodable` attaches a `StructCodec` as `cls.codec`, or, for a plain
  `enum.Enum`, a codec that writes the member index. `EnumCodec` encodes one
  of several variant classes as a `u64` index followed by the variant.
  `unzip_consensus` groups `(peer, item)` pairs by variant. Each group is keyed
  by the variant's snake-case name and holds the single field of each item.
- `minimint.types`: `Amount`, counted in milli-satoshi, with arithmetic,
  `from_msat`, `from_sat`, `from_str`, `from_str_in` with a `Denomination`,
  and `saturating_sub`. Also `PeerId`, `TransactionId` (32 bytes, from a
  SHA-256 of data or from hex) and `OutPoint`. Bad amount text raises
  `ParseAmountError`.
- `minimint.batch`: an `Accumulator` collects items through an
  `AccumulatorTx`. A transaction used as a context manager rolls back unless
  `commit()` was called. It supports `subtransaction()`, `extend`,
  `append_from_accumulators`, and the database helpers `append_insert_new`,
  `append_insert`, `append_delete` and `append_maybe_delete`, which create
  `BatchItem`s.
- `minimint.db`: the abstract `Database`, with raw byte operations and typed
  `insert_entry`, `get_value`, `remove_entry`, `find_by_prefix` and
  `apply_batch`. `DbKey` is the base for keys. A key's bytes are its
  `DB_PREFIX` byte followed by its encoding. Decoding errors are
  `WrongPrefix`, `WrongLength` and `OtherDecodingError`, all subclasses of
  `DecodingError`.
- `minimint.memdb`: `MemDatabase`, a thread-safe in-memory `Database`.
  `dump_db` prints its entries in hex to standard error.
- `minimint.audit`: an `Audit` balance sheet. It collects `AuditItem`s from
  database entries and sums them.
- `minimint.module`: `ApiError` (`not_found`, `bad_request`), `InputMeta`,
  `ApiEndpoint`, and the `api_endpoint(path, parse)` decorator for async
  handlers. It also defines the abstract `ModuleInterconnect`.
- `minimint.config`: `FeeConsensus` (`from_dict`, `to_dict`) and
  `load_from_file` for JSON files. Its errors are `CoreError`,
  `MismatchingVariant` and `PendingPreimage`, the only retryable one.
- `minimint.task`: asyncio helpers `spawn`, `block_in_place`, `sleep`,
  `sleep_until` and `timeout`. `timeout` raises `Elapsed` when the deadline
  passes.

## Examples

```python
from dataclasses import dataclass

from minimint.derive import encodable, field
from minimint.encoding import IntCodec, VecCodec

@encodable
@dataclass
class Example:
    vec: list = field(VecCodec(IntCodec(8)))
    num: int = field(IntCodec(32))

data = Example.codec.to_bytes(Example([1, 2, 3], 42))
assert data == bytes([3, 0, 0, 0, 0, 0, 0, 0, 1, 2, 3, 42, 0, 0, 0])
assert Example.codec.from_bytes(data) == Example([1, 2, 3], 42)
```

```python
from dataclasses import dataclass

from minimint.db import DbKey
from minimint.derive import encodable, field
from minimint.encoding import U64
from minimint.memdb import MemDatabase

@encodable
@dataclass(frozen=True)
class Balance:
    milli_sat: int = field(U64)

@encodable
@dataclass(frozen=True)
class BalanceKey(DbKey):
    DB_PREFIX = 0x42
    VALUE = Balance
    account: int = field(U64)

db = MemDatabase()
assert db.insert_entry(BalanceKey(1), Balance(500)) is None
assert db.get_value(BalanceKey(1)) == Balance(500)
```

```python
from minimint.batch import Accumulator

acc = Accumulator()
with acc.transaction() as tx:
    tx.append(1)
    tx.commit()
with acc.transaction() as tx:
    tx.append(2)  # rolled back: not committed
assert list(acc) == [1]
```

## What this package does not do

This package has no lightning gateway and no HTTP or RPC server. It does not
implement federation modules such as a mint, wallet or lightning contracts,
and it has no signatures or other cryptography. Storage is only the in-memory
`MemDatabase`. There is no on-disk database, and the package has no
command-line program.

## Tests

```
pip install -e ".[test]"
pytest
```