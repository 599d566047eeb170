"""
Punto d'ingresso per i CSV: decodifica, riconosce il dialetto e
costruisce le prenotazioni con il parser giusto.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from core.errors import FileParseError
from core.models import Reservation
from parsers.airbnb import build_airbnb_legacy, build_airbnb_transactions
from parsers.booking_csv import build_booking
from parsers.csv_tokenizer import decode_bytes, tokenize
from parsers.dialects import Dialect, build_column_map, detect_dialect

logger = logging.getLogger(__name__)

BUILDERS = {
    Dialect.BOOKING: build_booking,
    Dialect.AIRBNB_NEW: build_airbnb_transactions,
    Dialect.AIRBNB_LEGACY: build_airbnb_legacy,
}


@dataclass
class CsvParseResult:
    dialect: Dialect
    reservations: List[Reservation]
    warnings: List[str] = field(default_factory=list)


def parse_csv_text(text: str, source_file: str = "") -> CsvParseResult:
    table = tokenize(text)
    if not table.header:
        raise FileParseError(f"{source_file}: file CSV vuoto")

    dialect = detect_dialect(table.header)
    columns = build_column_map(table.header, dialect)
    logger.info("%s: riconosciuto come %s (%d righe)", source_file, dialect.value, len(table.rows))

    warnings = []
    if not columns.has_id:
        # Nessun segnale certo: probabilmente non è un export Airbnb/Booking
        warnings.append(
            f"Intestazione non riconosciuta: manca la colonna codice prenotazione ({dialect.value})"
        )
    elif columns.missing:
        warnings.append(f"Colonne non trovate: {', '.join(columns.missing)}")

    reservations = BUILDERS[dialect](table, columns, source_file)
    return CsvParseResult(dialect=dialect, reservations=reservations, warnings=warnings)


def parse_csv(content: bytes, source_file: str = "") -> CsvParseResult:
    """Legge il CSV (bytes) e restituisce le prenotazioni normalizzate."""
    if not content:
        raise FileParseError(f"{source_file}: file vuoto")
    return parse_csv_text(decode_bytes(content), source_file)
