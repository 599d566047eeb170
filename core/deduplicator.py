"""
Deduplicazione: unisce le nuove prenotazioni a quelle già caricate.

Chiave univoca = piattaforma + "-" + codice prenotazione.
A parità di chiave vince sempre l'ultima arrivata (ricaricare lo stesso
report non crea doppioni e aggiorna i dati).
"""

import logging
from typing import Iterable, List

from core.models import Reservation

logger = logging.getLogger(__name__)


def merge_reservations(existing: Iterable[Reservation], incoming: Iterable[Reservation]) -> List[Reservation]:
    """
    Restituisce existing + incoming senza chiavi duplicate.
    L'ordine è quello della prima comparsa di ogni chiave; un record sostituito
    resta nella posizione del record che rimpiazza.
    """
    by_key = {}
    for res in existing:
        by_key[res.key] = res

    replaced = 0
    for res in incoming:
        if res.key in by_key:
            replaced += 1
        by_key[res.key] = res

    logger.debug("Merge: %d prenotazioni totali, %d sostituite", len(by_key), replaced)
    return list(by_key.values())


def find_duplicate_keys(reservations: Iterable[Reservation]) -> set:
    """Chiavi che compaiono più di una volta nella sequenza."""
    seen = set()
    duplicates = set()
    for res in reservations:
        if res.key in seen:
            duplicates.add(res.key)
        seen.add(res.key)
    return duplicates


class ReservationStore:
    """Insieme autoritativo delle prenotazioni della sessione."""

    def __init__(self, reservations: Iterable[Reservation] = ()):
        self._reservations: List[Reservation] = merge_reservations([], reservations)

    def get_all(self) -> List[Reservation]:
        return list(self._reservations)

    def merge(self, incoming: Iterable[Reservation]) -> List[Reservation]:
        self._reservations = merge_reservations(self._reservations, incoming)
        return self.get_all()

    def __len__(self) -> int:
        return len(self._reservations)
