"""
Riepiloghi e pivot dalle prenotazioni normalizzate.

Produce DataFrame per Streamlit:
  - riepilogo per piattaforma (prenotazioni attive, notti, lordo, commissioni, netto)
  - pivot mese × piattaforma
  - conteggio per stato

Prenotazioni "attive" ai fini dei ricavi: OK e Mancata presentazione
(il no-show viene comunque pagato). Le cancellate sono escluse.
"""

from datetime import date
from typing import Iterable, Optional

import pandas as pd

from config import CEDOLARE_SECCA_RATE
from core.models import Platform, Reservation, Status

ACTIVE_STATUSES = frozenset({Status.OK, Status.NO_SHOW})

TOTAL_LABEL = "Totale"

FRAME_COLUMNS = [
    "id", "platform", "guest_name", "guests_description", "arrival", "departure",
    "booking_date", "status", "price", "commission", "nights", "net_pre_tax",
    "net_post_tax", "anno_mese", "active",
]


def _to_date(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        return None


def nights_between(arrival: str, departure: str) -> int:
    """Notti tra arrivo e partenza (minimo 1). Date non valide → 0."""
    start, end = _to_date(arrival), _to_date(departure)
    if start is None or end is None:
        return 0
    return max(1, abs((end - start).days))


def reservations_frame(reservations: Iterable[Reservation]) -> pd.DataFrame:
    """Una riga per prenotazione, con le colonne calcolate per i report."""
    rows = []
    for r in reservations:
        arrival = _to_date(r.arrival)
        net = r.price - r.commission
        rows.append({
            "id": r.id,
            "platform": r.platform.value,
            "guest_name": r.guest_name,
            "guests_description": r.guests_description,
            "arrival": r.arrival,
            "departure": r.departure,
            "booking_date": r.booking_date,
            "status": r.status.value,
            "price": r.price,
            "commission": r.commission,
            "nights": nights_between(r.arrival, r.departure),
            "net_pre_tax": net,
            "net_post_tax": net * (1 - CEDOLARE_SECCA_RATE),
            "anno_mese": arrival.strftime("%Y-%m") if arrival else "N/D",
            "active": r.status in ACTIVE_STATUSES,
        })
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def _aggregate(df: pd.DataFrame, by) -> pd.DataFrame:
    return df.groupby(by).agg(
        prenotazioni=("id", "count"),
        notti=("nights", "sum"),
        lordo=("price", "sum"),
        commissioni=("commission", "sum"),
        netto=("net_pre_tax", "sum"),
        netto_dopo_tasse=("net_post_tax", "sum"),
    )


def platform_summary(df: pd.DataFrame) -> pd.DataFrame:
    """Riepilogo per piattaforma + riga Totale, solo prenotazioni attive."""
    columns = ["piattaforma", "prenotazioni", "notti", "lordo", "commissioni", "netto", "netto_dopo_tasse"]
    active = df[df["active"]] if not df.empty else df
    if active.empty:
        return pd.DataFrame(columns=columns)

    summary = _aggregate(active, "platform").reindex([p.value for p in Platform], fill_value=0)
    summary.loc[TOTAL_LABEL] = summary.sum()
    summary = summary.reset_index().rename(columns={"platform": "piattaforma", "index": "piattaforma"})
    summary["prenotazioni"] = summary["prenotazioni"].astype(int)
    summary["notti"] = summary["notti"].astype(int)
    return summary.round(2)[columns]


def monthly_breakdown(df: pd.DataFrame) -> pd.DataFrame:
    """Pivot: mese × piattaforma, valori lordo / netto / notti, con totali."""
    active = df[df["active"]] if not df.empty else df
    if active.empty:
        return pd.DataFrame()

    pivot = active.pivot_table(
        values=["price", "net_pre_tax", "nights"],
        index="anno_mese",
        columns="platform",
        aggfunc="sum",
        fill_value=0,
        margins=True,
        margins_name=TOTAL_LABEL,
    )
    pivot = pivot.rename(columns={"price": "lordo", "net_pre_tax": "netto", "nights": "notti"}, level=0)
    return pivot.round(2)


def status_breakdown(df: pd.DataFrame) -> pd.DataFrame:
    """Numero di prenotazioni per stato e piattaforma (tutte, anche cancellate)."""
    if df.empty:
        return pd.DataFrame()
    return pd.crosstab(df["status"], df["platform"], margins=True, margins_name=TOTAL_LABEL)


def reservations_list(df: pd.DataFrame) -> pd.DataFrame:
    """Lista prenotazioni per visualizzazione tabellare, più recenti prima."""
    if df.empty:
        return pd.DataFrame()
    cols = ["arrival", "departure", "platform", "guest_name", "guests_description",
            "status", "nights", "price", "commission", "net_pre_tax", "id"]
    return df[cols].sort_values("arrival", ascending=False).reset_index(drop=True)
