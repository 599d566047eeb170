"""
Parser per il file CSV esportato da Booking.com (elenco prenotazioni).

Come esportare da Booking:
  Extranet → Prenotazioni → Scarica (CSV)

Colonne usate (nomi italiani o inglesi, vedi config.BOOKING_COLUMNS):
  Numero di prenotazione, Nome ospite/i, Arrivo, Partenza, Prenotato il,
  Stato, Persone, Durata (notti), Prezzo, Importo commissione

Formati:
  - date gg/mm/aaaa; "Prenotato il" ha anche l'ora ("15/02/2025 10:23:11")
  - importi con valuta, es. "144 EUR" o "28,08 EUR"
  - stato: ok / cancelled_by_guest / cancelled_by_hotel / no_show
"""

import logging
from typing import List

from core.models import Platform, Reservation, Status
from parsers.common import date_part, parse_amount, parse_int, plural, reformat_date
from parsers.csv_tokenizer import CsvTable
from parsers.dialects import NOT_FOUND, ColumnMap
from parsers.status import BOOKING_STATUS, classify_status

logger = logging.getLogger(__name__)


def _guests_description(columns: ColumnMap, row: List[str]) -> str:
    parts = []
    if columns.indexes.get("persons", NOT_FOUND) != NOT_FOUND:
        parts.append(plural(parse_int(columns.get(row, "persons")), "persona", "persone"))
    if columns.indexes.get("nights", NOT_FOUND) != NOT_FOUND:
        parts.append(plural(parse_int(columns.get(row, "nights")), "notte", "notti"))
    return ", ".join(parts)


def build_booking(table: CsvTable, columns: ColumnMap, source_file: str = "") -> List[Reservation]:
    """Export prenotazioni Booking.com → lista di Reservation."""
    reservations = []
    for row in table.rows:
        number = columns.get(row, "id")
        if not number:
            continue

        # Se manca il nome ospite si usa chi ha prenotato
        guest_name = columns.get(row, "guest_name") or columns.get(row, "booker")

        reservations.append(Reservation(
            id=number,
            platform=Platform.BOOKING,
            guest_name=guest_name,
            guests_description=_guests_description(columns, row),
            arrival=reformat_date(columns.get(row, "arrival"), "dmy"),
            departure=reformat_date(columns.get(row, "departure"), "dmy"),
            booking_date=reformat_date(date_part(columns.get(row, "booking_date")), "dmy"),
            status=classify_status(columns.get(row, "status"), BOOKING_STATUS, default=Status.OK),
            price=parse_amount(columns.get(row, "price")),
            commission=abs(parse_amount(columns.get(row, "commission"))),
            source_file=source_file,
        ))

    dropped = len(table.rows) - len(reservations)
    if dropped:
        logger.warning("%s: %d righe senza numero prenotazione scartate", source_file, dropped)
    return reservations
