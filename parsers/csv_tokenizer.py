"""
Lettura a basso livello dei CSV esportati da Airbnb e Booking.

  - decodifica (UTF-8 con/senza BOM, fallback latin-1)
  - separatore rilevato dalla sola riga di intestazione: tab > ; > ,
  - campi tra virgolette con separatori o a capo al loro interno,
    anche se la virgoletta di apertura segue degli spazi ('1, "a, b"')
  - righe vuote o di soli spazi ignorate

Le virgolette contano solo a inizio campo: un '"' in mezzo al testo
resta un carattere normale e viene tolto da clean_value.
"""

import csv
import io
from dataclasses import dataclass, field
from typing import List

from core.errors import FileParseError

BOM = "\ufeff"


@dataclass
class CsvTable:
    delimiter: str
    header: List[str]
    rows: List[List[str]] = field(default_factory=list)


def decode_bytes(content: bytes) -> str:
    """Decodifica il file: prima UTF-8 (toglie il BOM), poi latin-1."""
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return content.decode("latin-1")


def strip_bom(text: str) -> str:
    return text[1:] if text.startswith(BOM) else text


def detect_delimiter(header_line: str) -> str:
    """
    Il separatore si deduce solo dall'intestazione.
    La virgola è l'ultima scelta: nei CSV con ; compare dentro importi e indirizzi.
    """
    if "\t" in header_line:
        return "\t"
    if ";" in header_line:
        return ";"
    return ","


def clean_value(value: str) -> str:
    """Toglie le virgolette residue e gli spazi ai bordi."""
    return value.replace('"', "").strip()


def split_fields(line: str, delimiter: str) -> List[str]:
    """Divide una singola riga logica nei suoi campi."""
    reader = csv.reader([line], delimiter=delimiter, skipinitialspace=True)
    try:
        return [clean_value(v) for v in next(reader, [])]
    except csv.Error as e:
        raise FileParseError(f"riga CSV illeggibile ({e})") from e


def _first_line(text: str) -> str:
    for line in text.splitlines():
        if line.strip():
            return line
    return ""


def tokenize(text: str) -> CsvTable:
    """
    Trasforma il testo del CSV in intestazione + righe di campi puliti.
    Un campo tra virgolette può contenere il separatore o un a capo.
    Un CSV che il lettore non riesce a dividere (es. virgolette mai chiuse
    su un campo enorme) solleva FileParseError.
    """
    text = strip_bom(text)
    delimiter = detect_delimiter(_first_line(text))

    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter, skipinitialspace=True)
    rows = []
    try:
        for raw in reader:
            values = [clean_value(v) for v in raw]
            if not any(values):
                continue
            rows.append(values)
    except csv.Error as e:
        raise FileParseError(f"CSV malformato alla riga {reader.line_num} ({e})") from e

    if not rows:
        return CsvTable(delimiter=delimiter, header=[])

    header = [strip_bom(h).strip() for h in rows[0]]
    return CsvTable(delimiter=delimiter, header=header, rows=rows[1:])
