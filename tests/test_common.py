import pytest

from parsers.common import date_part, parse_amount, parse_int, plural, reformat_date


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("144 EUR", 144.0),
        ("28,08 €", 28.08),
        ("€ 264,96", 264.96),
        ("1.066,22 €", 1066.22),
        ("€1,066.22", 1066.22),
        ("1.234.567", 1234567.0),
        ("-12,50", -12.5),
        (52, 52.0),
        (12.5, 12.5),
    ],
)
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == pytest.approx(expected)


@pytest.mark.parametrize("raw", ["", None, "n/d", "abc", "-", "EUR"])
def test_parse_amount_unparsable_is_zero(raw):
    assert parse_amount(raw) == 0.0


def test_reformat_date_day_first_and_month_first():
    assert reformat_date("15/03/2025", "dmy") == "2025-03-15"
    assert reformat_date("03/15/2025", "mdy") == "2025-03-15"


def test_reformat_date_pads_month_and_day():
    assert reformat_date("5/3/2025", "dmy") == "2025-03-05"
    assert reformat_date("3/5/2025", "mdy") == "2025-03-05"


def test_reformat_date_passes_through_other_formats():
    assert reformat_date("2025-03-15") == "2025-03-15"
    assert reformat_date("15 mar 2025") == "15 mar 2025"
    assert reformat_date("") == ""


def test_date_part_drops_time():
    assert date_part("14/02/2025 10:23:11") == "14/02/2025"
    assert date_part("14/02/2025") == "14/02/2025"
    assert date_part("") == ""


def test_parse_int():
    assert parse_int("2") == 2
    assert parse_int("3.0") == 3
    assert parse_int("") == 0
    assert parse_int(None) == 0
    assert parse_int("1e999") == 0
    assert parse_int("inf") == 0


def test_plural():
    assert plural(1, "notte", "notti") == "1 notte"
    assert plural(0, "notte", "notti") == "0 notti"
    assert plural(3, "notte", "notti") == "3 notti"
