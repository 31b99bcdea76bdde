"""Transaction-type catalog snapshot used while decoding one import.

The catalog is loaded once per import (never per line) and handed to the
decoder as an immutable value. It maps each active row's durable id to its
business code and answers the reverse question: which id does code ``N``
resolve to?

Several rows may share a business code. Resolution picks the lowest id,
which is what "first match" means once rows are read in id order. Because
that tie-break is a guess rather than a business rule, :func:`load_type_catalog`
logs a warning for every ambiguous code it sees.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from db.models.cnab import CnabTransactionType
from sqlalchemy import select
from sqlalchemy.orm import Session

from .logging_setup import get_logger

logger = get_logger("cnab_importer.catalog")


@dataclass(frozen=True, slots=True)
class TypeCatalog:
    """Immutable id -> business code mapping, ordered by ascending id."""

    codes_by_id: Mapping[int, int]
    _first_id_by_code: Mapping[int, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        ordered = dict(sorted(self.codes_by_id.items()))
        first: dict[int, int] = {}
        for type_id, code in ordered.items():
            first.setdefault(code, type_id)
        object.__setattr__(self, "codes_by_id", MappingProxyType(ordered))
        object.__setattr__(self, "_first_id_by_code", MappingProxyType(first))

    @classmethod
    def from_rows(cls, rows: Iterable[tuple[int, int]]) -> TypeCatalog:
        """Build a catalog from ``(id, code)`` pairs."""

        return cls(codes_by_id={int(type_id): int(code) for type_id, code in rows})

    def resolve(self, code: int) -> int | None:
        """Return the durable id for business ``code``, or ``None`` when unknown."""

        return self._first_id_by_code.get(code)

    def __contains__(self, code: object) -> bool:
        return code in self._first_id_by_code

    def __len__(self) -> int:
        return len(self.codes_by_id)

    def ambiguous_codes(self) -> dict[int, list[int]]:
        """Return ``{code: [ids...]}`` for codes shared by more than one row."""

        counts = Counter(self.codes_by_id.values())
        return {
            code: [i for i, c in self.codes_by_id.items() if c == code]
            for code, n in sorted(counts.items())
            if n > 1
        }


def load_type_catalog(session: Session) -> TypeCatalog:
    """Read the active transaction types and return a catalog snapshot."""

    rows = session.execute(
        select(CnabTransactionType.id, CnabTransactionType.code)
        .where(CnabTransactionType.is_active.is_(True))
        .order_by(CnabTransactionType.id)
    ).all()
    catalog = TypeCatalog.from_rows((row.id, row.code) for row in rows)

    for code, ids in catalog.ambiguous_codes().items():
        logger.warning(
            "Transaction type code %s is shared by ids %s; resolving to id %s",
            code,
            ids,
            ids[0],
        )
    logger.debug("Loaded %d active transaction types", len(catalog))
    return catalog


__all__ = ["TypeCatalog", "load_type_catalog"]
