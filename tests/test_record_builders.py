import pytest

from core.models import Platform, Status
from parsers.csv_parser import parse_csv, parse_csv_text
from parsers.dialects import Dialect

LEGACY_HEADER = (
    '"Codice di conferma","Stato","Nome dell\'ospite","Contatto","N. di adulti","N. di bambini",'
    '"N. di neonati","Data di inizio","Data di fine","N. di notti","Prenotata","Annuncio","Guadagni"'
)

TRANSACTIONS_HEADER = (
    "Data,Data di arrivo prevista,Tipo,Codice di Conferma,Data della prenotazione,Data di inizio,"
    "Data di fine,Notti,Ospite,Annuncio,Dettagli,Codice di riferimento,Valuta,Importo,Pagato,"
    "Costi del servizio,Commissione per Pagamento rapido,Costi di pulizia,Guadagni lordi,"
    "Tasse di soggiorno,Anno dei guadagni"
)

BOOKING_HEADER = (
    "Numero di prenotazione;Prenotato da;Nome ospite/i;Arrivo;Partenza;Prenotato il;Stato;Camere;"
    "Persone;Adulti;Bambini;Prezzo;Percentuale commissione;Importo commissione;Stato pagamento;Durata (notti)"
)


# ─── Airbnb vecchio export ───────────────────────────────────────────────────

def test_legacy_airbnb_minimal_file():
    text = LEGACY_HEADER + "\n" + (
        '"HMABC123","Ospite precedente","Mario Rossi","+39 333","2","1","0",'
        '"15/03/2025","18/03/2025","3","2025-02-10","Casa","€ 264,96"'
    )
    result = parse_csv_text(text, "airbnb.csv")

    assert result.dialect == Dialect.AIRBNB_LEGACY
    assert len(result.reservations) == 1
    res = result.reservations[0]
    assert res.id == "HMABC123"
    assert res.platform == Platform.AIRBNB
    assert res.status == Status.OK
    assert res.guest_name == "Mario Rossi"
    assert res.guests_description == "2 adulti, 1 bambino, 0 neonati"
    assert res.arrival == "2025-03-15"
    assert res.departure == "2025-03-18"
    assert res.booking_date == "2025-02-10"
    assert res.price == pytest.approx(264.96)
    assert res.commission == 0.0
    assert res.source_file == "airbnb.csv"


def test_legacy_airbnb_status_mapping_and_missing_id():
    rows = [
        '"HM1","Confermata","A","","1","0","0","01/04/2025","03/04/2025","2","","","100"',
        '"HM2","Cancellata dall\'ospite","B","","1","0","1","05/04/2025","06/04/2025","1","","","0"',
        '"HM3","Mancata presentazione","C","","1","0","0","07/04/2025","08/04/2025","1","","","50"',
        '"","Confermata","D","","1","0","0","09/04/2025","10/04/2025","1","","","70"',
    ]
    result = parse_csv_text(LEGACY_HEADER + "\n" + "\n".join(rows), "airbnb.csv")

    statuses = {r.id: r.status for r in result.reservations}
    assert statuses == {"HM1": Status.OK, "HM2": Status.CANCELLED, "HM3": Status.NO_SHOW}
    assert result.reservations[1].guests_description == "1 adulto, 0 bambini, 1 neonato"


def test_legacy_airbnb_overflowing_counts_become_zero():
    text = LEGACY_HEADER + "\n" + (
        '"HM9","Confermata","Mario","","1e999","inf","0",'
        '"01/04/2025","03/04/2025","2","","","100"'
    )
    result = parse_csv_text(text, "airbnb.csv")

    assert [r.id for r in result.reservations] == ["HM9"]
    assert result.reservations[0].guests_description == "0 adulti, 0 bambini, 0 neonati"


# ─── Airbnb export transazioni ───────────────────────────────────────────────

def test_airbnb_transactions_keeps_only_reservation_rows():
    text = "\n".join([
        TRANSACTIONS_HEADER,
        '03/18/2025,03/19/2025,Prenotazione,HMXYZ789,02/10/2025,03/15/2025,03/18/2025,3,Anna Bianchi,'
        'Family Retreat,,,EUR,"230,50",,"34,46",,,"264,96",,2025',
        '03/19/2025,,Payout,,,,,,,,,,EUR,,"230,50",,,,,,',
        '03/18/2025,,Ritenuta fiscale per il reddito italiano,HMXYZ789,,,,,,,,,EUR,"-55,64",,,,,,,2025',
    ])
    result = parse_csv_text(text, "transazioni.csv")

    assert result.dialect == Dialect.AIRBNB_NEW
    assert len(result.reservations) == 1
    res = result.reservations[0]
    assert res.id == "HMXYZ789"
    assert res.platform == Platform.AIRBNB
    assert res.status == Status.OK
    assert res.guest_name == "Anna Bianchi"
    assert res.guests_description == "3 notti"
    assert res.arrival == "2025-03-15"
    assert res.departure == "2025-03-18"
    assert res.booking_date == "2025-02-10"
    assert res.price == pytest.approx(264.96)
    assert res.commission == pytest.approx(34.46)


def test_airbnb_transactions_english_export():
    text = "\n".join([
        "Date,Type,Confirmation code,Start date,End date,Nights,Guest,Amount,Service fee,Gross earnings",
        "04/02/2025,Reservation,HMENG1,04/01/2025,04/02/2025,1,John Smith,90.00,-10.00,100.00",
        "04/03/2025,Payout,,,,,,90.00,,",
    ])
    result = parse_csv_text(text, "transactions.csv")

    assert [r.id for r in result.reservations] == ["HMENG1"]
    res = result.reservations[0]
    assert res.guests_description == "1 notte"
    assert res.arrival == "2025-04-01"
    assert res.commission == pytest.approx(10.0)


# ─── Booking.com ─────────────────────────────────────────────────────────────

def test_booking_minimal_file():
    text = BOOKING_HEADER + "\n" + (
        "4915138809;Minella, Fabio;Fabio Minella;15/03/2025;16/03/2025;14/02/2025 10:23:11;ok;1;2;2;0;"
        "144 EUR;19,5;28,08 EUR;Pagata online;1"
    )
    result = parse_csv_text(text, "booking.csv")

    assert result.dialect == Dialect.BOOKING
    assert len(result.reservations) == 1
    res = result.reservations[0]
    assert res.id == "4915138809"
    assert res.platform == Platform.BOOKING
    assert res.status == Status.OK
    assert res.guest_name == "Fabio Minella"
    assert res.guests_description == "2 persone, 1 notte"
    assert res.arrival == "2025-03-15"
    assert res.departure == "2025-03-16"
    assert res.booking_date == "2025-02-14"
    assert res.price == pytest.approx(144.0)
    assert res.commission == pytest.approx(28.08)


def test_booking_status_vocabulary():
    rows = [
        "1;A;A;01/05/2025;02/05/2025;01/04/2025 09:00:00;no_show;1;1;1;0;80 EUR;19,5;15,60 EUR;;1",
        "2;B;B;03/05/2025;06/05/2025;01/04/2025 09:00:00;cancelled_by_guest;1;3;3;0;300 EUR;19,5;0 EUR;;3",
        "3;C;;07/05/2025;08/05/2025;01/04/2025 09:00:00;cancelled_by_hotel;1;1;1;0;0 EUR;19,5;0 EUR;;1",
        ";D;D;09/05/2025;10/05/2025;01/04/2025 09:00:00;ok;1;1;1;0;90 EUR;19,5;17,55 EUR;;1",
    ]
    result = parse_csv_text(BOOKING_HEADER + "\n" + "\n".join(rows), "booking.csv")

    statuses = {r.id: r.status for r in result.reservations}
    assert statuses == {"1": Status.NO_SHOW, "2": Status.CANCELLED, "3": Status.CANCELLED}
    # senza nome ospite si usa chi ha prenotato
    assert result.reservations[2].guest_name == "C"
    assert result.reservations[1].guests_description == "3 persone, 3 notti"


# ─── Casi limite ─────────────────────────────────────────────────────────────

def test_unrecognized_header_gives_warning_and_no_records():
    result = parse_csv_text("colonna1,colonna2\nx,y\n", "altro.csv")

    assert result.dialect == Dialect.AIRBNB_LEGACY
    assert result.reservations == []
    assert result.warnings and "non riconosciuta" in result.warnings[0]


def test_parse_csv_bytes_with_bom_and_semicolons():
    text = "\ufeff" + BOOKING_HEADER + "\n" + (
        "42;X;Ospite;01/06/2025;03/06/2025;01/05/2025 12:00:00;ok;1;2;2;0;200 EUR;19,5;39 EUR;;2"
    )
    result = parse_csv(text.encode("utf-8"), "booking.csv")

    assert [r.id for r in result.reservations] == ["42"]


def test_empty_file_is_a_file_level_error():
    from core.errors import FileParseError

    with pytest.raises(FileParseError):
        parse_csv(b"", "vuoto.csv")
    with pytest.raises(FileParseError):
        parse_csv(b"\n\n  \n", "vuoto.csv")
