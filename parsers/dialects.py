"""
Riconoscimento del tipo di CSV dall'intestazione.

Tre dialetti noti, controllati in quest'ordine (vince il primo):
  1. Booking.com      → colonna "numero di prenotazione" o "importo commissione"
  2. Airbnb (nuovo)   → colonne "Tipo" e "Guadagni lordi" entrambe presenti
  3. Airbnb (vecchio) → tutto il resto

Il vecchio export Airbnb condivide molte colonne con il nuovo, per questo il
segnale più specifico va controllato prima.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Sequence

from config import (
    AIRBNB_LEGACY_COLUMNS,
    AIRBNB_NEW_COLUMNS,
    AIRBNB_NEW_SIGNALS,
    BOOKING_COLUMNS,
    BOOKING_SIGNALS,
)

logger = logging.getLogger(__name__)

NOT_FOUND = -1


class Dialect(str, Enum):
    BOOKING = "Booking.com CSV"
    AIRBNB_NEW = "Airbnb CSV (transazioni)"
    AIRBNB_LEGACY = "Airbnb CSV (prenotazioni)"


DIALECT_COLUMNS = {
    Dialect.BOOKING: BOOKING_COLUMNS,
    Dialect.AIRBNB_NEW: AIRBNB_NEW_COLUMNS,
    Dialect.AIRBNB_LEGACY: AIRBNB_LEGACY_COLUMNS,
}


def _normalize(name: str) -> str:
    return name.strip().lower()


def _any_contains(header: Sequence[str], needles: Sequence[str]) -> bool:
    cols = [_normalize(h) for h in header]
    return any(n in c for c in cols for n in needles)


def _any_equals(header: Sequence[str], names: Sequence[str]) -> bool:
    cols = {_normalize(h) for h in header}
    return any(n in cols for n in names)


def detect_dialect(header: Sequence[str]) -> Dialect:
    if any(_any_contains(header, needles) for needles in BOOKING_SIGNALS.values()):
        return Dialect.BOOKING

    if (_any_equals(header, AIRBNB_NEW_SIGNALS["type"])
            and _any_contains(header, AIRBNB_NEW_SIGNALS["gross_earnings"])):
        return Dialect.AIRBNB_NEW

    return Dialect.AIRBNB_LEGACY


def find_column(header: Sequence[str], names: Sequence[str]) -> int:
    """Indice della prima colonna con uno dei nomi indicati, NOT_FOUND se assente."""
    cols = [_normalize(h) for h in header]
    for name in names:
        try:
            return cols.index(_normalize(name))
        except ValueError:
            continue
    return NOT_FOUND


@dataclass
class ColumnMap:
    """Campo logico → indice di colonna per un dialetto."""
    dialect: Dialect
    indexes: Dict[str, int]
    missing: List[str] = field(default_factory=list)

    def get(self, row: Sequence[str], name: str) -> str:
        """Valore del campo nella riga; stringa vuota se la colonna manca."""
        idx = self.indexes.get(name, NOT_FOUND)
        if idx == NOT_FOUND or idx >= len(row):
            return ""
        return row[idx]

    @property
    def has_id(self) -> bool:
        return self.indexes.get("id", NOT_FOUND) != NOT_FOUND


def build_column_map(header: Sequence[str], dialect: Dialect) -> ColumnMap:
    indexes = {}
    missing = []
    for name, aliases in DIALECT_COLUMNS[dialect].items():
        idx = find_column(header, aliases)
        indexes[name] = idx
        if idx == NOT_FOUND:
            missing.append(name)

    if missing:
        logger.warning("%s: colonne non trovate %s", dialect.value, ", ".join(missing))
    return ColumnMap(dialect=dialect, indexes=indexes, missing=missing)
