import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

import cashbook.suggest as suggest_mod
from cashbook.cli import app
from tests.helpers.openai_stub import OpenAIStub

runner = CliRunner()


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    url = f"sqlite+pysqlite:///{tmp_path / 'cli.sqlite3'}"
    result = runner.invoke(app, ["init-db", "--database-url", url])
    assert result.exit_code == 0, result.output
    assert "Database schema is ready." in result.output
    return url


def _invoke(db_url: str, *args: str):
    return runner.invoke(app, [*args, "--database-url", db_url, "--user", "u1"])


def _ids(db_url: str) -> list[str]:
    result = _invoke(db_url, "list", "--show-ids")
    assert result.exit_code == 0, result.output
    return [line.split("\t")[0] for line in result.output.splitlines() if "\t" in line]


def test_add_list_edit_delete(db_url: str):
    result = _invoke(db_url, "add", "--amount", "300", "--pages", "12", "--contact", "Rahim")
    assert result.exit_code == 0, result.output
    assert "Transaction added successfully." in result.output

    result = _invoke(db_url, "list")
    assert result.exit_code == 0, result.output
    assert "Total Cash In:     ৳ 300" in result.output
    assert "Showing 1 of 1 transactions." in result.output

    (entry_id,) = _ids(db_url)
    result = _invoke(db_url, "edit", entry_id, "--amount", "350")
    assert result.exit_code == 0, result.output
    assert "Transaction updated successfully." in result.output
    assert "Total Cash In:     ৳ 350" in _invoke(db_url, "list").output

    result = _invoke(db_url, "delete", entry_id)
    assert result.exit_code == 0, result.output
    assert "Transaction deleted successfully." in result.output
    assert "Showing 0 of 0 transactions." in _invoke(db_url, "list").output


def test_add_rejects_cash_in_without_pages(db_url: str):
    result = _invoke(db_url, "add", "--amount", "300")
    assert result.exit_code == 1
    assert "Pages are required for Cash In." in result.output
    assert _ids(db_url) == []


def test_add_requires_a_user(db_url: str):
    result = runner.invoke(
        app, ["add", "--type", "out", "--amount", "5", "--database-url", db_url]
    )
    assert result.exit_code == 1
    assert "A signed-in user is required." in result.output


def test_user_can_come_from_env(db_url: str, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("CASHBOOK_USER_ID", "u1")
    result = runner.invoke(
        app, ["add", "--type", "out", "--amount", "5", "--database-url", db_url]
    )
    assert result.exit_code == 0, result.output
    assert len(_ids(db_url)) == 1


def test_list_filters(db_url: str):
    _invoke(db_url, "add", "--amount", "100", "--pages", "1", "--contact", "Rahim")
    _invoke(db_url, "add", "--type", "out", "--amount", "40", "--category", "Food")

    result = _invoke(db_url, "list", "--type", "out")
    assert "Showing 1 of 2 transactions." in result.output
    result = _invoke(db_url, "list", "--search", "rahim")
    assert "Showing 1 of 2 transactions." in result.output


def test_report_to_json_file(db_url: str, tmp_path: Path):
    _invoke(db_url, "add", "--amount", "100", "--pages", "3", "--due", "--due-amount", "25")
    out_file = tmp_path / "report.json"

    result = _invoke(db_url, "report", "--status", "due", "--json", "--output", str(out_file))

    assert result.exit_code == 0, result.output
    data = json.loads(out_file.read_text(encoding="utf-8"))
    assert data["filter_description"] == "Type: all | Category: all | Status: due"
    assert data["totals"]["total_due"] == 25
    assert len(data["rows"]) == 1


def test_report_text(db_url: str):
    _invoke(db_url, "add", "--type", "out", "--amount", "60", "--category", "Rent")
    result = _invoke(db_url, "report")
    assert result.exit_code == 0, result.output
    assert "CASHBOOK REPORT" in result.output
    assert "Total Cash Out:    ৳ 60" in result.output


def test_edit_unknown_entry_fails(db_url: str):
    result = _invoke(db_url, "edit", "nope", "--amount", "1")
    assert result.exit_code == 1
    assert "No entry 'nope'" in result.output


def test_delete_unknown_entry_fails(db_url: str):
    result = _invoke(db_url, "delete", "nope")
    assert result.exit_code == 1
    assert "Failed to delete transaction" in result.output


def test_suggest_requires_api_key():
    result = runner.invoke(app, ["suggest", "--remark", "lunch"])
    assert result.exit_code == 1
    assert "OPENAI_API_KEY is not set" in result.output


def test_suggest_prints_category_and_mode(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    stub = OpenAIStub([{"suggestedCategory": "Food", "suggestedPaymentMode": "bKash"}])
    monkeypatch.setattr(suggest_mod, "OpenAI", lambda: stub)

    result = runner.invoke(app, ["suggest", "--type", "out", "--remark", "lunch"])

    assert result.exit_code == 0, result.output
    assert "Food\tbKash" in result.output


def test_suggest_needs_contact_or_remark(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    result = runner.invoke(app, ["suggest"])
    assert result.exit_code == 1
    assert "Please enter a contact or remark" in result.output


def test_add_with_suggest_but_no_context_still_saves(db_url: str):
    result = _invoke(db_url, "add", "--type", "out", "--amount", "5", "--suggest")
    assert result.exit_code == 0, result.output
    assert "Please enter a contact or remark to get suggestions." in result.output
    assert "Transaction added successfully." in result.output
    assert len(_ids(db_url)) == 1


@pytest.mark.parametrize(
    "args",
    [["list"], ["report"], ["edit", "some-id", "--amount", "1"], ["delete", "some-id"]],
)
def test_commands_require_a_user(db_url: str, args: list[str]):
    result = runner.invoke(app, [*args, "--database-url", db_url])
    assert result.exit_code == 1
    assert "A signed-in user is required." in result.output
