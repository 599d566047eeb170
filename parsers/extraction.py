"""
Validazione delle prenotazioni estratte dall'IA da immagini e PDF.

La risposta del servizio IA è trattata come dato non affidabile:
  1. parsing JSON, con riparazione locale se la risposta è malformata
     (blocchi ```json, testo attorno all'array, virgole finali, chiavi senza virgolette)
  2. se la riparazione fallisce, recupero dei singoli oggetti {...} validi
  3. ogni candidato passa dalla validazione: oggetto, piattaforma esatta
     ("Airbnb" / "Booking.com"), stato riconoscibile, codice non vuoto
"""

import json
import logging
import re
from collections import Counter
from typing import Any, Iterator, List, Optional

from core.errors import FileParseError
from core.models import Platform, Reservation
from parsers.common import parse_amount, reformat_date
from parsers.status import EXTRACTION_STATUS, classify_status

logger = logging.getLogger(__name__)

VALID_PLATFORMS = {p.value: p for p in Platform}

_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_DOUBLE_COMMA = re.compile(r",\s*,")
_UNQUOTED_KEY = re.compile(r"([{,]\s*)([A-Za-z_$][A-Za-z0-9_$]*)\s*:")


# ─── Riparazione JSON ────────────────────────────────────────────────────────

def repair_json(text: str) -> str:
    """Toglie i blocchi markdown, tiene solo [ ... ] e rimuove le virgole finali."""
    text = _FENCE.sub("", text)

    start = text.find("[")
    if start >= 0:
        text = text[start:]
    end = text.rfind("]")
    if end >= 0:
        text = text[:end + 1]

    text = _DOUBLE_COMMA.sub(",", text)
    text = _TRAILING_COMMA.sub(r"\1", text)
    return text.strip()


def quote_keys(text: str) -> str:
    """{id: "x"} → {"id": "x"}"""
    return _UNQUOTED_KEY.sub(r'\1"\2":', text)


def iter_json_objects(text: str) -> Iterator[str]:
    """Sottostringhe {...} bilanciate al primo livello (ignora le graffe nelle stringhe)."""
    depth = 0
    start = None
    in_string = False
    escaped = False
    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                yield text[start:i + 1]
                start = None


def _recover_objects(text: str, source_file: str) -> List[dict]:
    recovered = []
    for fragment in iter_json_objects(text):
        try:
            obj = json.loads(_TRAILING_COMMA.sub(r"\1", fragment))
        except json.JSONDecodeError:
            logger.warning("%s: oggetto malformato ignorato: %s", source_file, fragment[:100])
            continue
        if isinstance(obj, dict):
            recovered.append(obj)
    return recovered


def _as_candidates(data: Any, source_file: str) -> List[Any]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("reservations"), list):
        return data["reservations"]
    logger.warning("%s: la risposta IA non è un array (%s)", source_file, type(data).__name__)
    return []


def parse_extraction_response(text: Optional[str], source_file: str = "") -> List[Any]:
    """
    Testo della risposta IA → lista di candidati (ancora da validare).
    Solleva FileParseError solo se non si recupera nulla.
    """
    if not text or not text.strip():
        logger.warning("%s: risposta IA vuota", source_file)
        return []

    try:
        return _as_candidates(json.loads(text), source_file)
    except json.JSONDecodeError:
        pass

    repaired = repair_json(text)
    if repaired in ("[]", "{}"):
        logger.info("%s: nessuna prenotazione trovata", source_file)
        return []

    for attempt in (repaired, quote_keys(repaired)):
        try:
            return _as_candidates(json.loads(attempt), source_file)
        except json.JSONDecodeError as e:
            last_error = e

    logger.warning("%s: JSON non valido (%s), recupero oggetti singoli", source_file, last_error)
    recovered = _recover_objects(text, source_file)
    if not recovered:
        raise FileParseError(f"{source_file}: risposta IA illeggibile ({last_error})")

    logger.info("%s: recuperati %d oggetti dalla risposta malformata", source_file, len(recovered))
    return recovered


# ─── Validazione candidati ───────────────────────────────────────────────────

def _to_number(value) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return parse_amount(value)
    return 0.0


def _text(item: dict, name: str) -> str:
    value = item.get(name)
    return "" if value is None else str(value).strip()


def normalize_candidate(item: Any, source_file: str = "") -> Optional[Reservation]:
    """Candidato IA → Reservation, oppure None se non valido."""
    if not isinstance(item, dict):
        logger.debug("%s: candidato scartato, non è un oggetto: %r", source_file, item)
        return None

    label = item.get("platform")
    platform = VALID_PLATFORMS.get(label) if isinstance(label, str) else None
    if platform is None:
        logger.warning("%s: piattaforma non valida: %r", source_file, item.get("platform"))
        return None

    status = classify_status(item.get("status"), EXTRACTION_STATUS)
    if status is None:
        logger.warning("%s: stato non riconosciuto: %r", source_file, item.get("status"))
        return None

    reservation_id = _text(item, "id")
    if not reservation_id:
        logger.warning("%s: candidato senza codice prenotazione scartato", source_file)
        return None

    return Reservation(
        id=reservation_id,
        platform=platform,
        guest_name=_text(item, "guestName"),
        guests_description=_text(item, "guestsDescription"),
        arrival=reformat_date(_text(item, "arrival")),
        departure=reformat_date(_text(item, "departure")),
        booking_date=reformat_date(_text(item, "bookingDate")),
        status=status,
        price=_to_number(item.get("price")),
        commission=_to_number(item.get("commission")),
        source_file=source_file,
    )


def normalize_candidates(candidates: List[Any], source_file: str = "") -> List[Reservation]:
    """Valida tutti i candidati e tiene solo quelli validi."""
    raw_total = sum(_to_number(c.get("price")) for c in candidates if isinstance(c, dict))
    raw_statuses = Counter(str(c.get("status")) for c in candidates if isinstance(c, dict))
    logger.debug("%s: %d candidati, totale grezzo €%.2f, stati %s",
                 source_file, len(candidates), raw_total, dict(raw_statuses))

    reservations = []
    for item in candidates:
        res = normalize_candidate(item, source_file)
        if res is not None:
            reservations.append(res)

    dropped = len(candidates) - len(reservations)
    if dropped:
        logger.warning("%s: %d candidati IA scartati su %d", source_file, dropped, len(candidates))
    return reservations
