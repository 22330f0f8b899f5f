import pytest

from cashbook.filters import (
    describe_filters,
    filter_transactions,
    matches_date_range,
    reset_filters,
    update_filter,
)
from cashbook.models import FilterState
from tests.helpers.records import tx


@pytest.fixture
def records():
    return [
        tx(
            "a",
            contact="Rahim",
            remark="posters",
            amount=250,
            printerName="Toshiba 2523AD",
            pages=10,
            date="2024-01-10",
        ),
        tx(
            "b",
            type="out",
            amount=80,
            category="Food",
            paymentMode="bKash",
            isDue=True,
            dueAmount=30,
            date="2024-01-20",
        ),
        tx("c", contact="Karim", date="", time=""),
    ]


def _ids(rows):
    return [r.id for r in rows]


def test_default_filters_show_everything_in_order(records):
    assert _ids(filter_transactions(records, reset_filters())) == ["a", "b", "c"]


def test_text_search_is_case_insensitive_over_fields(records):
    assert _ids(filter_transactions(records, FilterState(text="RAHIM"))) == ["a"]
    assert _ids(filter_transactions(records, FilterState(text="bkash"))) == ["b"]
    assert _ids(filter_transactions(records, FilterState(text="toshiba"))) == ["a"]


def test_text_search_matches_amount_digits(records):
    assert _ids(filter_transactions(records, FilterState(text="25"))) == ["a"]


def test_due_and_paid_keywords_match_status(records):
    assert _ids(filter_transactions(records, FilterState(text="due"))) == ["b"]
    assert _ids(filter_transactions(records, FilterState(text="Paid"))) == ["a", "c"]


def test_type_and_category_selectors(records):
    assert _ids(filter_transactions(records, FilterState(type="out"))) == ["b"]
    assert _ids(filter_transactions(records, FilterState(category="Food"))) == ["b"]


def test_unknown_selector_values_mean_no_constraint(records):
    f = FilterState(type="sideways", category="Crypto")
    assert _ids(filter_transactions(records, f)) == ["a", "b", "c"]


def test_due_status_selector(records):
    assert _ids(filter_transactions(records, FilterState(due_status="due"))) == ["b"]
    assert _ids(filter_transactions(records, FilterState(due_status="paid"))) == ["a", "c"]


def test_end_date_includes_whole_day_and_undated_records_pass(records):
    f = FilterState(start_date="2024-01-20", end_date="2024-01-20")
    assert _ids(filter_transactions(records, f)) == ["b", "c"]
    f = FilterState(end_date="2024-01-10")
    assert _ids(filter_transactions(records, f)) == ["a", "c"]


def test_date_range_bounds():
    rec = tx("d", date="2024-01-21")
    assert not matches_date_range(rec, "", "2024-01-20")
    assert matches_date_range(rec, "2024-01-21", "")
    assert not matches_date_range(rec, "2024-01-22", "")
    # Malformed bounds are ignored.
    assert matches_date_range(rec, "not-a-date", "2024-13-45")


def test_filtering_is_a_subset_and_idempotent(records):
    f = FilterState(text="a", due_status="paid")
    once = filter_transactions(records, f)
    assert set(_ids(once)) <= set(_ids(records))
    assert filter_transactions(once, f) == once


def test_filtering_does_not_mutate_input(records):
    before = list(records)
    filter_transactions(records, FilterState(type="in"))
    assert records == before


def test_update_filter_replaces_known_fields_only():
    f = update_filter(reset_filters(), "category", "Rent")
    assert f.category == "Rent"
    assert update_filter(f, "colour", "red") is f


def test_describe_filters():
    assert describe_filters(reset_filters()) == ""
    f = FilterState(text="rahim", type="in", start_date="2024-01-01", end_date="2024-01-31")
    assert describe_filters(f) == (
        "From: 2024-01-01 | To: 2024-01-31 | Type: in | Category: all | Status: all"
        ' | Search: "rahim"'
    )


def test_text_search_tolerates_non_finite_amounts():
    rec = tx("big").model_copy(update={"amount": float("inf")})
    assert filter_transactions([rec], FilterState(text="rahim")) == []
