"""Tests for requirement tables: loading, validation and lookups."""

import json

import pytest

from tradedocs.domain.models import DocumentKind
from tradedocs.domain.requirements import ChapterRange, chapter_of
from tradedocs.infrastructure.tables import (
    RequirementTableError,
    load_requirement_table,
    parse_requirement_table,
)


def _table_json(**overrides) -> str:
    table = {
        "permit_rules": [
            {
                "name": "pharma",
                "chapters": [{"start": 29, "end": 30}],
                "permits": [{"name": "MINSA", "satisfied_by": "minsa_permit"}],
            }
        ],
        "chapter_documents": [],
    }
    table.update(overrides)
    return json.dumps(table)


# ═══════════════════════════════════════════════════
# Loading
# ═══════════════════════════════════════════════════

class TestLoading:

    def test_bundled_table(self, requirements):
        assert [rule.name for rule in requirements.permit_rules] == ["food", "pharmaceutical", "plant_origin"]
        assert len(requirements.chapter_documents) == 9

    def test_load_from_path(self, tmp_path):
        path = tmp_path / "table.json"
        path.write_text(_table_json(), encoding="utf-8")
        table = load_requirement_table(path)
        assert table.permit_rules[0].permits[0].satisfied_by is DocumentKind.MINSA_PERMIT

    def test_missing_file(self, tmp_path):
        with pytest.raises(RequirementTableError):
            load_requirement_table(tmp_path / "absent.json")

    def test_invalid_json(self):
        with pytest.raises(RequirementTableError, match="not valid JSON"):
            parse_requirement_table("{not json")

    def test_unknown_document_kind(self):
        bad = _table_json(permit_rules=[{
            "name": "x",
            "chapters": [{"start": 1, "end": 2}],
            "permits": [{"name": "X", "satisfied_by": "driver_license"}],
        }])
        with pytest.raises(RequirementTableError):
            parse_requirement_table(bad)

    def test_inverted_range(self):
        bad = _table_json(chapter_documents=[{"chapters": {"start": 10, "end": 5}, "documents": ["X"]}])
        with pytest.raises(RequirementTableError):
            parse_requirement_table(bad)

    def test_unexpected_key(self):
        with pytest.raises(RequirementTableError):
            parse_requirement_table(_table_json(extra_rules=[]))

    def test_top_level_not_an_object(self):
        with pytest.raises(RequirementTableError):
            parse_requirement_table("[]")


# ═══════════════════════════════════════════════════
# Lookups
# ═══════════════════════════════════════════════════

class TestChapterOf:

    @pytest.mark.parametrize("hint,expected", [
        ("0803.90.11", 8),
        ("30", 30),
        ("8471", 84),
        ("08.03", 8),
        ("8", None),
        ("", None),
        (None, None),
        ("abc", None),
    ])
    def test_chapter_of(self, hint, expected):
        assert chapter_of(hint) == expected


class TestChapterRange:

    def test_contains(self):
        assert 7 in ChapterRange(6, 8)
        assert 9 not in ChapterRange(6, 8)

    def test_inverted_raises(self):
        with pytest.raises(ValueError):
            ChapterRange(8, 6)

    def test_out_of_bounds_raises(self):
        with pytest.raises(ValueError):
            ChapterRange(0, 5)


class TestMissingPermits:

    def test_permit_satisfied_by_member(self, requirements):
        present = {DocumentKind.AUPSA_PERMIT, DocumentKind.PHYTOSANITARY_CERTIFICATE}
        assert requirements.missing_permits("0803", present) == ["MIDA agricultural permit"]

    def test_unregulated_chapter(self, requirements):
        assert requirements.missing_permits("8471.30", set()) == []

    def test_no_hint(self, requirements):
        assert requirements.missing_permits(None, set()) == []


class TestRequiredDocuments:

    def test_plant_chapter(self, requirements):
        assert requirements.required_documents("0803.90") == [
            "Commercial Invoice",
            "Bill of Lading / AWB",
            "Phytosanitary Certificate",
            "MIDA Import Permit",
            "Packing List (recommended)",
            "Certificate of Origin (if a trade agreement applies)",
        ]

    def test_no_hint(self, requirements):
        assert requirements.required_documents(None) == [
            "Commercial Invoice",
            "Bill of Lading / AWB",
            "Packing List (recommended)",
        ]

    def test_deduplicated(self):
        table = parse_requirement_table(_table_json(chapter_documents=[
            {"chapters": {"start": 29, "end": 29}, "documents": ["MSDS", "Commercial Invoice"]},
            {"chapters": {"start": 28, "end": 29}, "documents": ["MSDS"]},
        ]))
        assert table.required_documents("2901") == [
            "Commercial Invoice",
            "Bill of Lading / AWB",
            "MSDS",
            "Packing List (recommended)",
            "Certificate of Origin (if a trade agreement applies)",
        ]
