"""
Classificazione dello stato prenotazione.

Ogni contesto (dialetto CSV o risposta IA) ha una piccola tabella ordinata
(stato, parole chiave); si confronta in minuscolo per sottostringa e vince
la prima regola che corrisponde.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from core.models import Status


@dataclass(frozen=True)
class StatusRule:
    status: Status
    contains: Tuple[str, ...] = ()
    equals: Tuple[str, ...] = ()

    def matches(self, value: str) -> bool:
        return value in self.equals or any(k in value for k in self.contains)


StatusTable = Sequence[StatusRule]


AIRBNB_LEGACY_STATUS: StatusTable = (
    StatusRule(Status.CANCELLED, contains=("cancellat", "cancelled", "canceled", "annullat")),
    StatusRule(Status.NO_SHOW, contains=("mancata presentazione", "no-show", "no show", "noshow")),
)

BOOKING_STATUS: StatusTable = (
    StatusRule(Status.NO_SHOW, contains=("no_show", "no show", "no-show", "mancata presentazione")),
    StatusRule(Status.CANCELLED, contains=("cancel", "annullat")),
)

# Vocabolario più ampio: l'IA non sempre rispetta i valori richiesti
EXTRACTION_STATUS: StatusTable = (
    StatusRule(Status.NO_SHOW, contains=(
        "mancata", "no show", "no-show", "noshow", "no_show",
        "non presentato", "non si è presentato", "assente",
    )),
    StatusRule(Status.CANCELLED, contains=("cancel", "annul", "storn")),
    StatusRule(Status.OK, equals=("", "ok"), contains=(
        "conferm", "confirm", "attiva", "active", "completed", "completat",
        "checked", "valid", "pagata", "paid", "ospite precedente", "past guest",
    )),
)


def classify_status(value, table: StatusTable, default: Optional[Status] = None) -> Optional[Status]:
    """
    Stato normalizzato secondo la tabella.
    Se nessuna regola corrisponde restituisce `default` (None = stato non riconosciuto).
    """
    text = str(value or "").strip().lower()
    for rule in table:
        if rule.matches(text):
            return rule.status
    return default
