"""Balance sheets summing the assets and liabilities of modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List

from .db import Database, DbKey


@dataclass(frozen=True)
class AuditItem:
    """One named balance in milli satoshi; liabilities are negative."""

    name: str
    milli_sat: int

    def __str__(self) -> str:
        sats = self.milli_sat / 1000.0
        return f"{sats:>+15.3f}|{self.name}"


@dataclass
class Audit:
    """A list of balances collected from the database."""

    items: List[AuditItem] = field(default_factory=list)

    def sum(self) -> AuditItem:
        return AuditItem("Total sats", sum(item.milli_sat for item in self.items))

    def add_items(
        self,
        db: Database,
        key_prefix: DbKey,
        to_milli_sat: Callable[[Any, Any], int],
    ) -> None:
        """Add one item for every entry under ``key_prefix``, valued by ``to_milli_sat``."""
        self.items.extend(
            AuditItem(repr(key), to_milli_sat(key, value))
            for key, value in db.find_by_prefix(key_prefix)
        )

    def __str__(self) -> str:
        lines = ["- Balance Sheet -"]
        lines.extend(str(item) for item in self.items)
        lines.append(str(self.sum()))
        return "\n".join(lines)