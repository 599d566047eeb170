"""
Modelli dati: Reservation (prenotazione normalizzata) e relativi enum.
"""

from dataclasses import dataclass, asdict
from enum import Enum


class Platform(str, Enum):
    AIRBNB = "Airbnb"
    BOOKING = "Booking.com"


class Status(str, Enum):
    OK = "OK"
    CANCELLED = "Cancellata"
    NO_SHOW = "Mancata presentazione"


@dataclass(frozen=True)
class Reservation:
    """Una prenotazione normalizzata, uguale per tutti i formati di origine."""
    id: str                     # codice conferma Airbnb / numero prenotazione Booking
    platform: Platform
    guest_name: str
    guests_description: str     # es. "2 adulti, 1 bambino, 0 neonati" oppure "3 notti"
    arrival: str                # YYYY-MM-DD
    departure: str              # YYYY-MM-DD
    booking_date: str           # YYYY-MM-DD
    status: Status
    price: float                # importo lordo nella valuta del report
    commission: float = 0.0     # commissione piattaforma (0 se non riportata)
    source_file: str = ""       # file di origine (traceability)

    @property
    def key(self) -> str:
        """Chiave di deduplicazione: piattaforma + "-" + id."""
        return reservation_key(self.platform, self.id)

    def to_dict(self) -> dict:
        """Forma camelCase usata dai componenti di presentazione."""
        data = asdict(self)
        return {
            "id": data["id"],
            "platform": self.platform.value,
            "guestName": data["guest_name"],
            "guestsDescription": data["guests_description"],
            "arrival": data["arrival"],
            "departure": data["departure"],
            "bookingDate": data["booking_date"],
            "status": self.status.value,
            "price": data["price"],
            "commission": data["commission"],
        }


def reservation_key(platform: Platform, reservation_id: str) -> str:
    return f"{Platform(platform).value}-{reservation_id}"
