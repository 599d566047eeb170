import pytest

from core.models import Status
from parsers.status import (
    AIRBNB_LEGACY_STATUS,
    BOOKING_STATUS,
    EXTRACTION_STATUS,
    classify_status,
)


@pytest.mark.parametrize("status", list(Status))
def test_normalized_values_are_stable(status):
    assert classify_status(status.value, EXTRACTION_STATUS) == status


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("no-show", Status.NO_SHOW),
        ("Non si è presentato", Status.NO_SHOW),
        ("Assente", Status.NO_SHOW),
        ("Cancelled", Status.CANCELLED),
        ("Annullata", Status.CANCELLED),
        ("Confermata", Status.OK),
        ("Pagata online", Status.OK),
        ("completed", Status.OK),
        ("", Status.OK),
        (None, Status.OK),
    ],
)
def test_extraction_vocabulary(raw, expected):
    assert classify_status(raw, EXTRACTION_STATUS) == expected


def test_extraction_unknown_status_is_rejected():
    assert classify_status("in attesa", EXTRACTION_STATUS) is None


def test_first_matching_rule_wins():
    # "no show (cancellata)" contiene entrambe le famiglie: vince la prima regola
    assert classify_status("no show (cancellata)", EXTRACTION_STATUS) == Status.NO_SHOW
    assert classify_status("cancelled_no_show", BOOKING_STATUS) == Status.NO_SHOW


def test_csv_tables_default_to_ok():
    assert classify_status("Ospite precedente", AIRBNB_LEGACY_STATUS, default=Status.OK) == Status.OK
    assert classify_status("CANCELLATA", AIRBNB_LEGACY_STATUS, default=Status.OK) == Status.CANCELLED
    assert classify_status("ok", BOOKING_STATUS, default=Status.OK) == Status.OK
    assert classify_status("cancelled_by_guest", BOOKING_STATUS, default=Status.OK) == Status.CANCELLED
