"""Tests for the tradedocs command line."""

import json

import pytest

from tradedocs.cli import main
from tradedocs.config import get_settings


@pytest.fixture
def document_files(tmp_path, invoice_text, bill_of_lading_text):
    invoice = tmp_path / "invoice.txt"
    invoice.write_text(invoice_text, encoding="utf-8")
    bill = tmp_path / "bl.txt"
    bill.write_text(bill_of_lading_text, encoding="utf-8")
    return [invoice, bill]


class TestAnalyzeCommand:

    def test_json_output(self, engine, document_files, capsys):
        exit_code = main(["analyze", *map(str, document_files), "--json"], engine=engine)
        assert exit_code == 0

        data = json.loads(capsys.readouterr().out)
        assert [d["kind"] for d in data["documents"]] == ["commercial_invoice", "bill_of_lading"]
        assert len(data["cases"]) == 1
        assert data["cases"][0]["consistency"]["verdict"] == "approved"

    def test_report_output(self, engine, document_files, capsys):
        assert main(["analyze", *map(str, document_files)], engine=engine) == 0
        out = capsys.readouterr().out
        assert "CASE INV-2024-0415  [YELLOW]" in out
        assert "2 documents, 1 case files" in out

    def test_unreadable_file(self, engine, document_files, tmp_path, capsys):
        missing = tmp_path / "missing.txt"
        exit_code = main(["analyze", str(document_files[0]), str(missing)], engine=engine)
        assert exit_code == 1
        assert "missing.txt" in capsys.readouterr().err


class TestRequirementsCommand:

    def test_json_output(self, engine, capsys):
        assert main(["requirements", "0803.90", "--json"], engine=engine) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["tariff_hint"] == "0803.90"
        assert "Phytosanitary Certificate" in data["documents"]

    def test_list_output(self, engine, capsys):
        assert main(["requirements"], engine=engine) == 0
        assert "  - Commercial Invoice" in capsys.readouterr().out

    def test_broken_requirement_table(self, monkeypatch, tmp_path, capsys):
        broken = tmp_path / "table.json"
        broken.write_text("{not json", encoding="utf-8")
        monkeypatch.setenv("REQUIREMENTS_TABLE_PATH", str(broken))
        get_settings.cache_clear()
        try:
            assert main(["requirements"]) == 2
        finally:
            get_settings.cache_clear()
        assert "Configuration error" in capsys.readouterr().err

    def test_command_required(self):
        with pytest.raises(SystemExit):
            main([])
