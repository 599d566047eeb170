"""
Estrazione prenotazioni da immagini e PDF tramite IA (Anthropic).

Il modello riceve il documento + le istruzioni e risponde con un array JSON
di prenotazioni. La risposta è solo testo: la validazione è in parsers.extraction.

Errori:
  - chiave mancante, autenticazione, rifiuto del modello → FatalExtractionError (non si riprova)
  - 429, 5xx, sovraccarico, rete, timeout             → TransientExtractionError (si riprova)
  - altri errori della richiesta (es. file troppo grande) → ExtractionError (si salta il file)
"""

import asyncio
import base64
import logging
import os
from typing import Awaitable, Callable, Optional, Protocol

import anthropic

from config import (
    ANTHROPIC_API_KEY_ENV,
    EXTRACTION_BACKOFF_SECONDS,
    EXTRACTION_MAX_RETRIES,
    EXTRACTION_MAX_TOKENS,
    EXTRACTION_MODEL,
    EXTRACTION_TIMEOUT_SECONDS,
)
from core.errors import (
    ContentBlockedError,
    ExtractionError,
    FatalExtractionError,
    MissingCredentialsError,
    RetriesExhaustedError,
    TransientExtractionError,
)

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

EXTRACTION_PROMPT = """ANALIZZA COMPLETAMENTE questo documento e trova TUTTE le prenotazioni presenti.

TIPOLOGIE DI DOCUMENTO:
1. Booking.com - Lista prenotazioni (tabella): ogni riga è una prenotazione, leggi OGNI riga.
2. Airbnb - Report dei guadagni mensile: è solo un riepilogo aggregato, senza singole
   prenotazioni. In questo caso rispondi con un array vuoto: []
3. Screenshot di app/siti Airbnb o Booking.com: estrai tutti i dettagli visibili.

Per ogni prenotazione restituisci un oggetto con ESATTAMENTE questi campi:
{
  "id": "codice/numero prenotazione (es. 4915138809, HM12345)",
  "platform": "Booking.com" oppure "Airbnb" (solo questi due valori),
  "guestName": "nome completo dell'ospite",
  "guestsDescription": "dettagli ospiti (es. 2 ospiti, 2 adulti 1 bambino)",
  "arrival": "YYYY-MM-DD",
  "departure": "YYYY-MM-DD",
  "bookingDate": "YYYY-MM-DD",
  "status": "OK" | "Cancellata" | "Mancata presentazione",
  "price": numero (es. 144 per €144, 264.96 per €264,96),
  "commission": numero (es. 28.08 per €28,08), 0 se non indicata
}

STATI:
- "OK" / "Pagata online" / "Confermata" → "OK"
- "Mancata presentazione" / "no show" / "no-show" → "Mancata presentazione"
- "Cancellata" / "Cancelled" / "Annullata" → "Cancellata"

DATE: "15 mar 2025" → "2025-03-15". Formato finale sempre YYYY-MM-DD.

Rispondi SOLO con l'array JSON, senza testo prima o dopo."""


class ExtractionClient(Protocol):
    async def extract(self, content: bytes, mime_type: str, file_name: str) -> str:
        ...


class AnthropicExtractor:
    """Client IA per l'estrazione; la chiave viene da argomento o da ANTHROPIC_API_KEY."""

    def __init__(self, api_key: Optional[str] = None, model: str = EXTRACTION_MODEL,
                 max_tokens: int = EXTRACTION_MAX_TOKENS):
        self.model = model
        self.max_tokens = max_tokens
        api_key = api_key or os.environ.get(ANTHROPIC_API_KEY_ENV)
        # I tentativi li gestisce call_with_retry
        self._client = anthropic.AsyncAnthropic(api_key=api_key, max_retries=0) if api_key else None

    @staticmethod
    def _document_block(content: bytes, mime_type: str) -> dict:
        data = base64.standard_b64encode(content).decode("ascii")
        block_type = "document" if mime_type == "application/pdf" else "image"
        return {
            "type": block_type,
            "source": {"type": "base64", "media_type": mime_type, "data": data},
        }

    async def extract(self, content: bytes, mime_type: str, file_name: str) -> str:
        if self._client is None:
            raise MissingCredentialsError()

        try:
            response = await self._client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=0,
                messages=[{
                    "role": "user",
                    "content": [
                        self._document_block(content, mime_type),
                        {"type": "text", "text": EXTRACTION_PROMPT},
                    ],
                }],
            )
        except (anthropic.AuthenticationError, anthropic.PermissionDeniedError) as e:
            raise MissingCredentialsError(f"Chiave API non valida o senza permessi: {e}") from e
        except anthropic.RateLimitError as e:
            raise TransientExtractionError(f"Limite richieste raggiunto: {e}") from e
        except anthropic.APIConnectionError as e:
            raise TransientExtractionError(f"Errore di connessione: {e}") from e
        except anthropic.APIStatusError as e:
            if e.status_code >= 500:
                raise TransientExtractionError(f"Servizio IA sovraccarico ({e.status_code})") from e
            raise ExtractionError(f"{file_name}: richiesta rifiutata ({e.status_code}): {e}") from e

        if response.stop_reason == "refusal":
            raise ContentBlockedError(file_name)
        if response.stop_reason == "max_tokens":
            logger.warning("%s: risposta IA troncata (max_tokens)", file_name)

        return "".join(block.text for block in response.content if block.type == "text")


async def call_with_retry(
    call: Callable[[], Awaitable[str]],
    *,
    timeout: float = EXTRACTION_TIMEOUT_SECONDS,
    max_retries: int = EXTRACTION_MAX_RETRIES,
    backoff_seconds: float = EXTRACTION_BACKOFF_SECONDS,
    sleep: Sleep = asyncio.sleep,
    label: str = "",
) -> str:
    """
    Esegue `call` con una scadenza fissa per tentativo.
    Gli errori temporanei si ripetono con attesa esponenziale (2s, 4s, 8s...);
    quelli fatali vengono rilanciati subito.
    """
    attempts = max_retries + 1
    last_error: Exception = None
    for attempt in range(attempts):
        try:
            return await asyncio.wait_for(call(), timeout=timeout)
        except FatalExtractionError:
            raise
        except asyncio.TimeoutError:
            last_error = TransientExtractionError(f"nessuna risposta entro {timeout:.0f}s")
        except TransientExtractionError as e:
            last_error = e

        if attempt < attempts - 1:
            wait = backoff_seconds * (2 ** attempt)
            logger.warning("%s: tentativo %d/%d fallito (%s), riprovo tra %.1fs",
                           label, attempt + 1, attempts, last_error, wait)
            await sleep(wait)

    logger.error("%s: servizio IA non disponibile dopo %d tentativi", label, attempts)
    raise RetriesExhaustedError(attempts, last_error)
