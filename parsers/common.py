"""
Conversioni comuni ai parser: importi, date, descrizione ospiti.
"""

import re

_NOT_AMOUNT = re.compile(r"[^0-9,.\-]")


def parse_amount(value) -> float:
    """
    Converte un importo in float.
      '144 EUR' → 144.0   '28,08 €' → 28.08   '1.066,22' → 1066.22   '€1,066.22' → 1066.22
    Valori non interpretabili → 0.0
    """
    if value is None:
        return 0.0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)

    s = _NOT_AMOUNT.sub("", str(value))
    if not s or s in ("-", ".", ","):
        return 0.0

    if "," in s and "." in s:
        # Il separatore decimale è quello che compare per ultimo
        if s.rfind(",") > s.rfind("."):
            s = s.replace(".", "").replace(",", ".")
        else:
            s = s.replace(",", "")
    elif s.count(",") > 1:
        s = s.replace(",", "")
    elif s.count(".") > 1:
        s = s.replace(".", "")
    else:
        s = s.replace(",", ".")

    try:
        return float(s)
    except ValueError:
        return 0.0


def parse_int(value) -> int:
    """Numero intero da stringa ('2', '2.0', ''); 0 se non valido."""
    try:
        return int(float(str(value).strip().replace(",", ".")))
    except (TypeError, ValueError, OverflowError):
        return 0


def reformat_date(value: str, order: str = "dmy") -> str:
    """
    Riscrive una data 'gg/mm/aaaa' (order='dmy') o 'mm/gg/aaaa' (order='mdy')
    in 'aaaa-mm-gg'. Se non sono tre parti separate da '/', la lascia invariata.
    """
    if not value:
        return ""
    value = value.strip()
    parts = value.split("/")
    if len(parts) != 3:
        return value

    if order == "mdy":
        month, day, year = parts
    else:
        day, month, year = parts
    return f"{year.strip()}-{month.strip().zfill(2)}-{day.strip().zfill(2)}"


def date_part(value: str) -> str:
    """'15/02/2025 10:23:11' → '15/02/2025'"""
    return value.strip().split(" ")[0] if value else ""


def plural(count: int, singular: str, plural_form: str) -> str:
    return f"{count} {singular if count == 1 else plural_form}"
