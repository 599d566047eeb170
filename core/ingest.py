"""
Importazione di un gruppo di file caricati dall'utente.

  - .csv           → parser locale, tutti i file in parallelo
  - PDF / immagini → servizio IA, un file alla volta con pausa fissa tra le chiamate
  - .xls / .xlsx   → rifiutati (esportare in CSV)

Un errore su un file non ferma gli altri: ogni file ha il suo FileReport e
alla fine c'è un unico riepilogo errori. Un errore fatale del servizio IA
(es. chiave mancante) ferma solo la coda IA, i file successivi risultano saltati.
"""

import asyncio
import functools
import logging
import os
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from config import (
    CSV_EXTENSIONS,
    DOCUMENT_MIME_TYPES,
    EXTRACTION_BACKOFF_SECONDS,
    EXTRACTION_DELAY_SECONDS,
    EXTRACTION_MAX_RETRIES,
    EXTRACTION_TIMEOUT_SECONDS,
    SPREADSHEET_EXTENSIONS,
)
from core.deduplicator import ReservationStore, find_duplicate_keys
from core.errors import FatalExtractionError, FileParseError, IngestionError
from core.models import Reservation
from parsers.ai_extractor import AnthropicExtractor, ExtractionClient, Sleep, call_with_retry
from parsers.csv_parser import parse_csv
from parsers.extraction import normalize_candidates, parse_extraction_response

logger = logging.getLogger(__name__)

KIND_CSV = "csv"
KIND_DOCUMENT = "documento"


@dataclass
class UploadedDocument:
    name: str
    content: bytes
    mime_type: Optional[str] = None

    @property
    def extension(self) -> str:
        return os.path.splitext(self.name.lower())[1]


@dataclass
class FileReport:
    name: str
    kind: str
    count: int = 0
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchResult:
    reservations: List[Reservation]
    reports: List[FileReport]

    @property
    def errors(self) -> List[str]:
        return [f"{r.name}: {r.error}" for r in self.reports if r.error]

    def error_summary(self) -> Optional[str]:
        """Un solo messaggio per tutti i file non importati."""
        errors = self.errors
        if not errors:
            return None
        return f"{len(errors)} file non importati su {len(self.reports)}:\n" + "\n".join(f"- {e}" for e in errors)


def classify_document(doc: UploadedDocument) -> str:
    ext = doc.extension
    if ext in CSV_EXTENSIONS:
        return KIND_CSV
    if ext in DOCUMENT_MIME_TYPES or (doc.mime_type or "").startswith("image/"):
        return KIND_DOCUMENT
    if ext in SPREADSHEET_EXTENSIONS:
        raise FileParseError("formato Excel non supportato: esporta il report in CSV")
    raise FileParseError(f"tipo di file non supportato ({ext or 'senza estensione'})")


def _mime_type(doc: UploadedDocument) -> str:
    return DOCUMENT_MIME_TYPES.get(doc.extension) or doc.mime_type or "application/octet-stream"


# ─── CSV ─────────────────────────────────────────────────────────────────────

async def _parse_csv_document(doc: UploadedDocument) -> Tuple[FileReport, List[Reservation]]:
    result = parse_csv(doc.content, doc.name)
    report = FileReport(
        name=doc.name,
        kind=result.dialect.value,
        count=len(result.reservations),
        warnings=result.warnings,
    )
    return report, result.reservations


async def parse_csv_documents(docs: List[UploadedDocument]) -> List[Tuple[FileReport, List[Reservation]]]:
    """Tutti i CSV insieme; un file illeggibile non blocca gli altri."""
    outcomes = await asyncio.gather(*(_parse_csv_document(d) for d in docs), return_exceptions=True)

    results = []
    for doc, outcome in zip(docs, outcomes):
        if isinstance(outcome, IngestionError):
            logger.error("%s: %s", doc.name, outcome)
            results.append((FileReport(name=doc.name, kind=KIND_CSV, error=str(outcome)), []))
        elif isinstance(outcome, Exception):
            logger.error("%s: errore imprevisto", doc.name, exc_info=outcome)
            results.append((FileReport(name=doc.name, kind=KIND_CSV, error=f"errore imprevisto: {outcome}"), []))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            results.append(outcome)
    return results


# ─── PDF / immagini ──────────────────────────────────────────────────────────

async def extract_sequentially(
    docs: List[UploadedDocument],
    extractor: ExtractionClient,
    *,
    delay_seconds: float = EXTRACTION_DELAY_SECONDS,
    sleep: Sleep = asyncio.sleep,
    timeout: float = EXTRACTION_TIMEOUT_SECONDS,
    max_retries: int = EXTRACTION_MAX_RETRIES,
    backoff_seconds: float = EXTRACTION_BACKOFF_SECONDS,
) -> List[Tuple[FileReport, List[Reservation]]]:
    """
    Un file alla volta, con `sleep(delay_seconds)` tra una chiamata e la successiva
    per non sovraccaricare il servizio IA.
    """
    results = []
    fatal: Optional[FatalExtractionError] = None

    for i, doc in enumerate(docs):
        report = FileReport(name=doc.name, kind=KIND_DOCUMENT)
        if fatal is not None:
            report.error = f"saltato: {fatal}"
            results.append((report, []))
            continue

        reservations: List[Reservation] = []
        try:
            logger.info("%s: estrazione IA (%d/%d)", doc.name, i + 1, len(docs))
            text = await call_with_retry(
                functools.partial(extractor.extract, doc.content, _mime_type(doc), doc.name),
                timeout=timeout,
                max_retries=max_retries,
                backoff_seconds=backoff_seconds,
                sleep=sleep,
                label=doc.name,
            )
            candidates = parse_extraction_response(text, doc.name)
            reservations = normalize_candidates(candidates, doc.name)
            report.count = len(reservations)
            if candidates and len(reservations) < len(candidates):
                report.warnings.append(f"{len(candidates) - len(reservations)} righe non valide scartate")
        except FatalExtractionError as e:
            logger.error("%s: %s", doc.name, e)
            report.error = str(e)
            fatal = e
        except IngestionError as e:
            logger.error("%s: %s", doc.name, e)
            report.error = str(e)
        except Exception as e:
            logger.exception("%s: errore imprevisto", doc.name)
            report.error = f"errore imprevisto: {e}"

        results.append((report, reservations))

        if fatal is None and i < len(docs) - 1:
            await sleep(delay_seconds)

    return results


# ─── Batch ───────────────────────────────────────────────────────────────────

async def process_batch(
    documents: Iterable[UploadedDocument],
    extractor: Optional[ExtractionClient] = None,
    **extract_options,
) -> BatchResult:
    """
    Legge tutti i file e restituisce le prenotazioni normalizzate (prima quelle
    dai CSV, poi quelle dall'IA) con un report per ogni file, nell'ordine di caricamento.
    """
    documents = list(documents)
    reports = {}
    csv_docs, ai_docs = [], []

    for idx, doc in enumerate(documents):
        try:
            kind = classify_document(doc)
        except FileParseError as e:
            logger.warning("%s: %s", doc.name, e)
            reports[idx] = FileReport(name=doc.name, kind="non supportato", error=str(e))
            continue
        (csv_docs if kind == KIND_CSV else ai_docs).append((idx, doc))

    reservations: List[Reservation] = []

    if csv_docs:
        csv_results = await parse_csv_documents([d for _, d in csv_docs])
        for (idx, _), (report, found) in zip(csv_docs, csv_results):
            reports[idx] = report
            reservations.extend(found)

    if ai_docs:
        if extractor is None:
            extractor = AnthropicExtractor()
        ai_results = await extract_sequentially([d for _, d in ai_docs], extractor, **extract_options)
        for (idx, _), (report, found) in zip(ai_docs, ai_results):
            reports[idx] = report
            reservations.extend(found)

    duplicates = find_duplicate_keys(reservations)
    if duplicates:
        logger.info("%d prenotazioni presenti in più file, vale l'ultima letta", len(duplicates))

    return BatchResult(reservations=reservations, reports=[reports[i] for i in sorted(reports)])


async def ingest(store: ReservationStore, documents: Iterable[UploadedDocument],
                 extractor: Optional[ExtractionClient] = None, **extract_options) -> BatchResult:
    """Elabora il batch e, solo alla fine, unisce il risultato allo store."""
    result = await process_batch(documents, extractor, **extract_options)
    store.merge(result.reservations)
    logger.info("Importate %d prenotazioni, %d nello store", len(result.reservations), len(store))
    return result
