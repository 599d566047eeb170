"""
Parser per i CSV esportati da Airbnb. Due formati:

Vecchio export (Prenotazioni → Esporta):
  una riga per prenotazione, date gg/mm/aaaa, colonne "Codice di conferma",
  "Stato", "N. di adulti/bambini/neonati", "Guadagni". Nessuna commissione.

Nuovo export (Transazioni → Esporta CSV):
  righe di tipo Prenotazione / Payout / Ritenuta fiscale..., date mm/gg/aaaa
  (formato americano). Si tengono solo le righe Prenotazione, tutte valide (OK).
  Prezzo = "Guadagni lordi", commissione = "Costi del servizio".
"""

import logging
from typing import List

from config import AIRBNB_RESERVATION_TYPES
from core.models import Platform, Reservation, Status
from parsers.common import parse_amount, parse_int, plural, reformat_date
from parsers.csv_tokenizer import CsvTable
from parsers.dialects import ColumnMap
from parsers.status import AIRBNB_LEGACY_STATUS, classify_status

logger = logging.getLogger(__name__)


def _guests_description(adults: int, children: int, infants: int) -> str:
    return ", ".join([
        plural(adults, "adulto", "adulti"),
        plural(children, "bambino", "bambini"),
        plural(infants, "neonato", "neonati"),
    ])


def build_airbnb_legacy(table: CsvTable, columns: ColumnMap, source_file: str = "") -> List[Reservation]:
    """Vecchio export prenotazioni Airbnb → lista di Reservation."""
    reservations = []
    for row in table.rows:
        code = columns.get(row, "id")
        if not code:
            continue

        status = classify_status(columns.get(row, "status"), AIRBNB_LEGACY_STATUS, default=Status.OK)

        reservations.append(Reservation(
            id=code,
            platform=Platform.AIRBNB,
            guest_name=columns.get(row, "guest_name"),
            guests_description=_guests_description(
                parse_int(columns.get(row, "adults")),
                parse_int(columns.get(row, "children")),
                parse_int(columns.get(row, "infants")),
            ),
            arrival=reformat_date(columns.get(row, "arrival"), "dmy"),
            departure=reformat_date(columns.get(row, "departure"), "dmy"),
            booking_date=reformat_date(columns.get(row, "booking_date"), "dmy"),
            status=status,
            price=parse_amount(columns.get(row, "earnings")),
            commission=0.0,  # il vecchio export riporta solo il netto
            source_file=source_file,
        ))

    _log_dropped(table, reservations, source_file)
    return reservations


def _is_reservation_row(tipo: str) -> bool:
    tipo = tipo.lower()
    return any(t in tipo for t in AIRBNB_RESERVATION_TYPES)


def build_airbnb_transactions(table: CsvTable, columns: ColumnMap, source_file: str = "") -> List[Reservation]:
    """
    Nuovo export transazioni Airbnb → lista di Reservation.
    Payout, ritenute e altre righe contabili vengono ignorate.
    """
    reservations = []
    skipped_types = 0
    for row in table.rows:
        if not _is_reservation_row(columns.get(row, "type")):
            skipped_types += 1
            continue

        code = columns.get(row, "id")
        if not code:
            continue

        nights = parse_int(columns.get(row, "nights"))
        reservations.append(Reservation(
            id=code,
            platform=Platform.AIRBNB,
            guest_name=columns.get(row, "guest_name"),
            guests_description=plural(nights, "notte", "notti"),
            arrival=reformat_date(columns.get(row, "arrival"), "mdy"),
            departure=reformat_date(columns.get(row, "departure"), "mdy"),
            booking_date=reformat_date(columns.get(row, "booking_date"), "mdy"),
            status=Status.OK,
            price=parse_amount(columns.get(row, "gross")),
            commission=abs(parse_amount(columns.get(row, "service_fee"))),
            source_file=source_file,
        ))

    if skipped_types:
        logger.debug("%s: %d righe non di prenotazione ignorate", source_file, skipped_types)
    _log_dropped(table, reservations, source_file, expected=len(table.rows) - skipped_types)
    return reservations


def _log_dropped(table: CsvTable, reservations: List[Reservation], source_file: str, expected: int = None) -> None:
    if expected is None:
        expected = len(table.rows)
    dropped = expected - len(reservations)
    if dropped > 0:
        logger.warning("%s: %d righe senza codice prenotazione scartate", source_file, dropped)
