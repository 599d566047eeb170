"""
Eccezioni dell'importazione.

Gli errori di riga non arrivano mai qui: vengono gestiti con valori di default
o scartando la riga. Questi errori riguardano un intero file o il servizio IA.
"""


class IngestionError(Exception):
    """Base per gli errori a livello di file."""


class FileParseError(IngestionError):
    """File illeggibile, vuoto, di tipo non supportato o JSON non recuperabile."""


class ExtractionError(IngestionError):
    """Errore del servizio di estrazione IA."""


class TransientExtractionError(ExtractionError):
    """Limite di richieste, servizio sovraccarico, errore 5xx o timeout: si può riprovare."""


class RetriesExhaustedError(ExtractionError):
    def __init__(self, attempts: int, last_error: Exception):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Servizio IA non disponibile dopo {attempts} tentativi ({last_error}). Riprova tra qualche minuto."
        )


class FatalExtractionError(ExtractionError):
    """Errore non recuperabile: inutile riprovare."""


class MissingCredentialsError(FatalExtractionError):
    def __init__(self, message: str = ""):
        super().__init__(
            message or "Chiave API mancante: imposta ANTHROPIC_API_KEY o aggiungila in .streamlit/secrets.toml"
        )


class ContentBlockedError(FatalExtractionError):
    def __init__(self, file_name: str):
        self.file_name = file_name
        super().__init__(
            f"Il servizio IA ha rifiutato di analizzare {file_name}. Prova con uno screenshot diverso o con l'export CSV."
        )
