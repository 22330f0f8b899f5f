import json
from datetime import datetime

from cashbook.models import FilterState
from cashbook.report import build_report, format_money, format_number, render_report_text
from tests.helpers.records import doc

GENERATED = datetime(2024, 5, 1, 12, 0)


def _docs():
    return [
        doc("a", amount=250, contact="Rahim", remark="posters", pages=10, date="2024-04-01"),
        doc("b", amount=100, pages=2, printerName="Epson L3250", date="2024-04-03"),
        doc("c", type="out", amount=80, category="Food", isDue=True, dueAmount=30),
    ]


def test_report_rows_follow_filters_and_totals_cover_everything():
    report = build_report(_docs(), FilterState(type="in"), generated_at=GENERATED)

    assert [r.id for r in report.rows] == ["b", "a"]
    assert report.totals.total_in == 350
    assert report.totals.total_out == 80
    assert report.filter_description == "Type: in | Category: all | Status: all"


def test_render_report_text():
    report = build_report(_docs(), FilterState(), generated_at=GENERATED)
    text = render_report_text(report)

    assert text.splitlines()[0] == "CASHBOOK REPORT"
    assert "Generated on: 2024-05-01 12:00" in text
    assert "Net Balance:       ৳ 270" in text
    assert "Total Due (Credit): ৳ 30" in text
    assert "Rahim / posters" in text
    assert "No transactions match" not in text


def test_render_report_text_without_rows():
    report = build_report([], FilterState(text="nobody"), generated_at=GENERATED)
    text = render_report_text(report)
    assert 'Search: "nobody"' in text
    assert text.endswith("No transactions match the current filters.")


def test_json_export():
    report = build_report(_docs(), FilterState(due_status="due"), generated_at=GENERATED)
    data = json.loads(report.model_dump_json())
    assert data["title"] == "CashBook Report"
    assert [row["id"] for row in data["rows"]] == ["c"]
    assert data["totals"]["total_due"] == 30


def test_number_formatting():
    assert format_number(1234.5) == "1,234.5"
    assert format_number(100) == "100"
    assert format_number(0) == "0"
    assert format_money(-50) == "৳ -50"
