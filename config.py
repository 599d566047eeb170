"""
Configurazione centralizzata - modifica qui i mapping delle colonne e i parametri IA.
"""

import os

# Livello di log (DEBUG mostra anche le singole righe scartate)
LOG_LEVEL = os.environ.get("PANNELLO_HOST_LOG_LEVEL", "INFO")

# ─── Estensioni accettate ────────────────────────────────────────────────────

CSV_EXTENSIONS = (".csv",)

# Estensione → MIME type per i file inviati all'estrazione IA
DOCUMENT_MIME_TYPES = {
    ".pdf":  "application/pdf",
    ".png":  "image/png",
    ".jpg":  "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif":  "image/gif",
}

# Fogli di calcolo: l'utente deve esportarli in CSV
SPREADSHEET_EXTENSIONS = (".xls", ".xlsx")

# ─── Rilevamento dialetto CSV ────────────────────────────────────────────────
# Sottostringhe case-insensitive cercate nei nomi delle colonne.

# Booking.com: basta una delle due famiglie
BOOKING_SIGNALS = {
    "booking_number": ("numero di prenotazione", "numero prenotazione", "booking number", "book number"),
    "commission_amount": ("importo commissione", "importo della commissione", "commission amount"),
}

# Airbnb nuovo formato: servono entrambe (nome colonna esatto)
AIRBNB_NEW_SIGNALS = {
    "type": ("tipo", "type"),
    "gross_earnings": ("guadagni lordi", "gross earnings"),
}

# ─── Mapping colonne per dialetto ────────────────────────────────────────────
# campo logico → nomi colonna possibili (confronto esatto, case-insensitive)

AIRBNB_LEGACY_COLUMNS = {
    "id":           ("Codice di conferma", "Confirmation code"),
    "status":       ("Stato", "Status"),
    "guest_name":   ("Nome dell'ospite", "Guest name"),
    "adults":       ("N. di adulti", "# of adults"),
    "children":     ("N. di bambini", "# of children"),
    "infants":      ("N. di neonati", "# of infants"),
    "arrival":      ("Data di inizio", "Start date"),
    "departure":    ("Data di fine", "End date"),
    "booking_date": ("Prenotata", "Booked"),
    "earnings":     ("Guadagni", "Earnings"),
}

AIRBNB_NEW_COLUMNS = {
    "type":         ("Tipo", "Type"),
    "id":           ("Codice di Conferma", "Confirmation code", "Confirmation Code"),
    "guest_name":   ("Ospite", "Guest"),
    "nights":       ("Notti", "Nights"),
    "arrival":      ("Data di inizio", "Start date"),
    "departure":    ("Data di fine", "End date"),
    "booking_date": ("Data della prenotazione", "Data di prenotazione", "Booking date"),
    "gross":        ("Guadagni lordi", "Gross earnings"),
    "service_fee":  ("Costi del servizio", "Service fee"),
}

BOOKING_COLUMNS = {
    "id":           ("Numero di prenotazione", "Numero prenotazione", "Book number", "Booking number"),
    "guest_name":   ("Nome ospite/i", "Nome dell'ospite", "Guest name(s)", "Guest name"),
    "booker":       ("Prenotato da", "Booked by"),
    "arrival":      ("Arrivo", "Check-in"),
    "departure":    ("Partenza", "Check-out"),
    "booking_date": ("Prenotato il", "Data di prenotazione", "Booked on"),
    "status":       ("Stato", "Status"),
    "persons":      ("Persone", "Persons"),
    "nights":       ("Durata (notti)", "Duration (nights)"),
    "price":        ("Prezzo", "Price"),
    "commission":   ("Importo commissione", "Importo della commissione", "Commission amount"),
}

# Valore della colonna Tipo (Airbnb nuovo formato) che identifica una prenotazione
AIRBNB_RESERVATION_TYPES = ("reservation", "prenotazione")

# ─── Estrazione IA (immagini / PDF) ──────────────────────────────────────────

ANTHROPIC_API_KEY_ENV = "ANTHROPIC_API_KEY"
EXTRACTION_MODEL = os.environ.get("PANNELLO_HOST_MODEL", "claude-sonnet-4-5-20250929")
EXTRACTION_MAX_TOKENS = 8192

EXTRACTION_TIMEOUT_SECONDS = 120.0   # scadenza per singola chiamata
EXTRACTION_MAX_RETRIES = 3           # tentativi aggiuntivi dopo il primo
EXTRACTION_BACKOFF_SECONDS = 2.0     # 2s, 4s, 8s
EXTRACTION_DELAY_SECONDS = 2.0       # pausa fissa tra un file e il successivo

# ─── Report ──────────────────────────────────────────────────────────────────

# Cedolare secca applicata al netto (prezzo - commissione)
CEDOLARE_SECCA_RATE = 0.21
