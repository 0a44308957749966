from datetime import date

import pytest

from notary.models.deed import Deed
from notary.services.sequence_service import (
    allocate_numbers,
    format_deed_number,
    format_order_number,
    next_deed_number,
    next_order_number,
)


def deed(deed_date, deed_number="", order_number="", **kw):
    return Deed(deed_date=deed_date, deed_number=deed_number, order_number=order_number, **kw)


def test_deed_number_continues_month_maximum():
    deeds = [
        deed("2025-01-03", "01", "001"),
        deed("2025-01-08", "02", "002"),
        deed("2025-01-15", "05", "003"),
    ]
    assert next_deed_number(deeds, "2025-01-20") == "06"


def test_first_deed_of_year_gets_order_001():
    deeds = [deed("2024-12-30", "31", "250")]
    for d in ("2025-01-01", "2025-06-15", "2025-12-31"):
        assert next_order_number(deeds, d) == "001"


def test_empty_collection():
    numbers = allocate_numbers([], date(2025, 4, 1))
    assert (numbers.deed_number, numbers.order_number) == ("01", "001")
    assert (numbers.deed_seq, numbers.order_seq) == (1, 1)


def test_deed_number_resets_monthly_but_order_number_runs_yearly():
    deeds = [
        deed("2025-01-05", "01", "001"),
        deed("2025-01-06", "02", "002"),
        deed("2025-01-28", "03", "003"),
    ]
    numbers = allocate_numbers(deeds, "2025-02-01")
    assert numbers.deed_number == "01"
    assert numbers.order_number == "004"


def test_same_month_other_year_is_ignored():
    deeds = [deed("2024-01-10", "09", "040")]
    numbers = allocate_numbers(deeds, "2025-01-10")
    assert (numbers.deed_number, numbers.order_number) == ("01", "001")


@pytest.mark.parametrize("seq, expected", [(1, "01"), (9, "09"), (10, "10"), (100, "100")])
def test_deed_number_width(seq, expected):
    assert format_deed_number(seq) == expected


@pytest.mark.parametrize("seq, expected", [(1, "001"), (42, "042"), (999, "999"), (1000, "1000")])
def test_order_number_width(seq, expected):
    assert format_order_number(seq) == expected


def test_deed_number_crosses_two_digits():
    deeds = [deed("2025-05-02", "09", "009")]
    assert next_deed_number(deeds, "2025-05-30") == "10"


def test_deed_number_strips_non_digits():
    deeds = [deed("2025-01-02", "No. 1-2"), deed("2025-01-03", "A7")]
    # "No. 1-2" -> 12
    assert next_deed_number(deeds, "2025-01-31") == "13"


def test_order_number_tolerates_legacy_year_suffix():
    deeds = [deed("2025-03-01", order_number="012/2025"), deed("2025-03-02", order_number="007")]
    assert next_order_number(deeds, "2025-03-03") == "013"


def test_malformed_numbers_count_as_zero():
    deeds = [deed("2025-01-02", "abc", "n/a"), deed("2025-01-03", "", "")]
    numbers = allocate_numbers(deeds, "2025-01-04")
    assert (numbers.deed_number, numbers.order_number) == ("01", "001")


def test_stored_sequences_take_precedence_over_display_strings():
    deeds = [deed("2025-01-02", "xx", "yy", deed_seq=7, order_seq=30)]
    numbers = allocate_numbers(deeds, "2025-01-20")
    assert (numbers.deed_number, numbers.order_number) == ("08", "031")


def test_deeds_with_unreadable_dates_are_ignored():
    deeds = [deed("pas une date", "50", "500"), deed("2025-01-02", "03", "003")]
    numbers = allocate_numbers(deeds, "2025-01-20")
    assert (numbers.deed_number, numbers.order_number) == ("04", "004")


def test_invalid_target_date():
    with pytest.raises(ValueError):
        allocate_numbers([], "31/01/2025")
