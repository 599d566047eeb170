"""
Pannello Host - prenotazioni Airbnb & Booking.com
Web app Streamlit: carica i report (CSV, PDF, screenshot), unisce le
prenotazioni senza doppioni e mostra riepiloghi mensili.
"""

import asyncio
import io
import os

import pandas as pd
import streamlit as st

from config import ANTHROPIC_API_KEY_ENV, LOG_LEVEL
from core.deduplicator import ReservationStore
from core.ingest import UploadedDocument, ingest
from core.logging import configure_logging
from parsers.ai_extractor import AnthropicExtractor
from reports.pivot import (
    monthly_breakdown,
    platform_summary,
    reservations_frame,
    reservations_list,
    status_breakdown,
)

configure_logging(LOG_LEVEL)

st.set_page_config(
    page_title="Pannello Host",
    page_icon="🏠",
    layout="wide",
)

st.title("🏠 Pannello Host")

if "store" not in st.session_state:
    st.session_state["store"] = ReservationStore()
store: ReservationStore = st.session_state["store"]


# ── Chiave API per l'estrazione da PDF/immagini ─────────────────────────────
def get_api_key():
    """Chiave Anthropic da st.secrets (Streamlit Cloud) o dalla variabile d'ambiente."""
    try:
        return st.secrets["anthropic"]["api_key"]
    except (KeyError, FileNotFoundError):
        return os.environ.get(ANTHROPIC_API_KEY_ENV)


with st.sidebar:
    st.header("Stato")
    if get_api_key():
        st.success("✓ Estrazione IA disponibile")
    else:
        st.warning("Chiave IA mancante: solo CSV")
        st.caption("Configura `ANTHROPIC_API_KEY` o `.streamlit/secrets.toml`")

    st.metric("Prenotazioni caricate", len(store))
    if len(store) and st.button("Ricomincia", type="secondary"):
        st.session_state["store"] = ReservationStore()
        st.rerun()

    st.divider()
    st.caption("**Come esportare i file:**")
    with st.expander("Airbnb CSV"):
        st.write("Prenotazioni → Esporta, oppure Transazioni → Esporta CSV")
    with st.expander("Booking.com CSV"):
        st.write("Extranet → Prenotazioni → Scarica")
    with st.expander("PDF e screenshot"):
        st.write("Liste prenotazioni Booking.com o schermate delle app")


# ── Export helper ────────────────────────────────────────────────────────────
def df_to_excel_bytes(df: pd.DataFrame) -> bytes:
    """Converte DataFrame in bytes XLSX per il download."""
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Prenotazioni")
    return buf.getvalue()


tab_import, tab_report = st.tabs(["📥 Importa", "📊 Prenotazioni"])


# ============================================================
# TAB 1: IMPORTA
# ============================================================
with tab_import:
    st.header("Importa report")
    st.write("Carica uno o più file: il tipo viene riconosciuto automaticamente.")

    with st.form("upload", clear_on_submit=True):
        uploaded_files = st.file_uploader(
            "Trascina qui i file o clicca per selezionare",
            accept_multiple_files=True,
            type=["csv", "pdf", "png", "jpg", "jpeg", "webp", "gif", "xls", "xlsx"],
            help="CSV Airbnb/Booking → lettura locale  |  PDF e immagini → estrazione IA",
        )
        submitted = st.form_submit_button("Importa", type="primary")

    if submitted and uploaded_files:
        documents = [
            UploadedDocument(name=f.name, content=f.getvalue(), mime_type=f.type)
            for f in uploaded_files
        ]
        with st.spinner(f"Analisi di {len(documents)} file in corso..."):
            result = asyncio.run(ingest(store, documents, AnthropicExtractor(api_key=get_api_key())))

        st.subheader("File elaborati")
        st.dataframe(
            pd.DataFrame([{
                "File": r.name,
                "Tipo": r.kind,
                "Prenotazioni": r.count,
                "Note": "; ".join(r.warnings) or "—",
                "Esito": "✓" if r.ok else f"✗ {r.error}",
            } for r in result.reports]),
            use_container_width=True,
            hide_index=True,
        )

        summary = result.error_summary()
        if summary:
            st.error(summary)
        if result.reservations:
            st.success(f"✓ {len(result.reservations)} prenotazioni importate, {len(store)} in totale.")


# ============================================================
# TAB 2: PRENOTAZIONI
# ============================================================
with tab_report:
    st.header("Prenotazioni")

    df = reservations_frame(store.get_all())
    if df.empty:
        st.info("Nessuna prenotazione. Importa i file dal tab Importa.")
    else:
        summary = platform_summary(df)
        totals = summary[summary["piattaforma"] == "Totale"]

        st.subheader("KPI")
        k1, k2, k3, k4 = st.columns(4)
        if not totals.empty:
            t = totals.iloc[0]
            k1.metric("Prenotazioni attive", int(t["prenotazioni"]))
            k2.metric("Notti", int(t["notti"]))
            k3.metric("Lordo €", f"{t['lordo']:.2f}")
            k4.metric("Netto dopo cedolare €", f"{t['netto_dopo_tasse']:.2f}")

        st.subheader("Per piattaforma")
        st.dataframe(summary, use_container_width=True, hide_index=True)

        st.subheader("Per mese")
        st.dataframe(monthly_breakdown(df), use_container_width=True)

        st.subheader("Per stato")
        st.dataframe(status_breakdown(df), use_container_width=True)

        st.subheader("Elenco")
        listing = reservations_list(df)
        st.dataframe(listing, use_container_width=True, hide_index=True)
        st.download_button(
            "⬇️ Scarica Excel",
            data=df_to_excel_bytes(listing),
            file_name="prenotazioni.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
