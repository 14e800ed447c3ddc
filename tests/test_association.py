"""Tests for orphan suggestion ranking and the association veto."""

import pytest

from tradedocs.domain.aggregation import CaseAggregator
from tradedocs.domain.association import rank_suggestions, score_case, validate_association
from tradedocs.domain.models import AssociationVerdict, DocumentKind

INVOICE = DocumentKind.COMMERCIAL_INVOICE
BL = DocumentKind.BILL_OF_LADING
PACKING = DocumentKind.PACKING_LIST


@pytest.fixture
def aggregator(requirements, id_generator, clock):
    return CaseAggregator(requirements=requirements, id_generator=id_generator, clock=clock)


@pytest.fixture
def acme_case(aggregator, make_record):
    records = [
        make_record(
            INVOICE,
            importer="Acme Import Corp",
            exporter="Pacific Fruit Exporters",
            document_number="INV-2024-0415",
            tariff_hint="0803.90.11",
            country_of_origin="Ecuador",
        ),
        make_record(
            BL,
            importer="Acme Import Corp",
            exporter="Pacific Fruit Exporters",
            declared_weight=1000.0,
        ),
    ]
    return aggregator.build_case_files(records)[0]


@pytest.fixture
def globex_case(aggregator, make_record):
    return aggregator.build_case_files([make_record(INVOICE, importer="Globex Trading Ltd")])[0]


# ═══════════════════════════════════════════════════
# Ranking
# ═══════════════════════════════════════════════════

class TestRankSuggestions:

    def test_exact_importer_only(self, acme_case, globex_case, make_record):
        orphan = make_record(PACKING, importer="acme import corp")
        suggestions = rank_suggestions(orphan, [globex_case, acme_case])
        assert len(suggestions) == 1
        assert suggestions[0].case_id == acme_case.id
        assert suggestions[0].score == 40

    def test_importer_containment(self, acme_case, make_record):
        orphan = make_record(PACKING, importer="Acme Import")
        assert score_case(orphan, acme_case).score == 30

    def test_importer_similarity(self, acme_case, make_record):
        orphan = make_record(PACKING, importer="Acme Imports Corp")
        # neither string contains the other
        assert score_case(orphan, acme_case).score == 20

    def test_all_signals_capped(self, acme_case, make_record):
        orphan = make_record(
            PACKING,
            importer="Acme Import Corp",
            exporter="PACIFIC FRUIT EXPORTERS",
            tariff_hint="0803.90.11",
            document_number="INV-2024-0415",
            country_of_origin="ecuador",
        )
        suggestion = score_case(orphan, acme_case)
        # 40 + 25 + 20 + 35 + 10 = 130
        assert suggestion.score == 100
        assert len(suggestion.reasons) == 5

    @pytest.mark.parametrize("hint,expected", [
        ("0803.90.11", 20),
        ("080390", 20),
        ("0803.10", 10),
        ("0803", 10),
        ("0804.90", 0),
        ("08", 0),
    ])
    def test_tariff_tiers(self, acme_case, make_record, hint, expected):
        orphan = make_record(PACKING, tariff_hint=hint)
        assert score_case(orphan, acme_case).score == expected

    def test_zero_scores_dropped(self, acme_case, make_record):
        orphan = make_record(PACKING, importer="Unrelated Holdings")
        assert rank_suggestions(orphan, [acme_case]) == []

    def test_sorted_descending_stable(self, aggregator, make_record):
        first = aggregator.build_case_files([make_record(INVOICE, importer="Acme Import")])[0]
        second = aggregator.build_case_files([make_record(INVOICE, importer="Acme")])[0]
        best = aggregator.build_case_files([make_record(INVOICE, importer="Acme Import Corp")])[0]

        orphan = make_record(PACKING, importer="Acme Import Corp")
        suggestions = rank_suggestions(orphan, [first, second, best])
        assert [s.case_id for s in suggestions] == [best.id, first.id, second.id]
        assert [s.score for s in suggestions] == [40, 30, 30]

    def test_does_not_mutate_cases(self, acme_case, make_record):
        before = acme_case.to_dict()
        rank_suggestions(make_record(PACKING, importer="Acme Import Corp"), [acme_case])
        assert acme_case.to_dict() == before


# ═══════════════════════════════════════════════════
# Veto
# ═══════════════════════════════════════════════════

class TestValidateAssociation:

    def test_unrelated_importer_rejected(self, acme_case, make_record):
        orphan = make_record(PACKING, importer="Globex Trading Ltd")
        result = validate_association(orphan, acme_case)
        assert not result.success
        assert result.verdict is AssociationVerdict.REJECTED
        assert result.returned_to_pool
        assert any(line.startswith("CRITICAL:") for line in result.details)

    def test_matching_importer_approved(self, acme_case, make_record):
        orphan = make_record(PACKING, importer="ACME IMPORT CORP.")
        result = validate_association(orphan, acme_case)
        assert result.success
        assert result.verdict is AssociationVerdict.APPROVED
        assert not result.returned_to_pool
        assert result.details[0].startswith("PASS:")

    def test_missing_importer_warns(self, acme_case, make_record):
        result = validate_association(make_record(PACKING), acme_case)
        assert result.success
        assert result.details[0].startswith("WARNING:")

    def test_duplicate_kind_noted(self, acme_case, make_record):
        orphan = make_record(BL, importer="Acme Import Corp")
        result = validate_association(orphan, acme_case)
        assert result.success
        assert any(line.startswith("NOTE:") for line in result.details)

    def test_unknown_kind_never_noted(self, aggregator, make_record):
        case = aggregator.build_case_files([make_record(DocumentKind.UNKNOWN, importer="Acme")])[0]
        result = validate_association(make_record(DocumentKind.UNKNOWN, importer="Acme"), case)
        assert not any(line.startswith("NOTE:") for line in result.details)

    def test_invoice_exporter_mismatch_rejected(self, acme_case, make_record):
        orphan = make_record(INVOICE, importer="Acme Import Corp", exporter="Other Exporter SA")
        result = validate_association(orphan, acme_case)
        assert not result.success
        assert any("Exporter" in line and line.startswith("CRITICAL:") for line in result.details)

    def test_exporter_ignored_for_non_invoices(self, acme_case, make_record):
        orphan = make_record(PACKING, importer="Acme Import Corp", exporter="Other Exporter SA")
        assert validate_association(orphan, acme_case).success

    def test_weight_deviation_warns_only(self, acme_case, make_record):
        orphan = make_record(PACKING, importer="Acme Import Corp", declared_weight=1200.0)
        result = validate_association(orphan, acme_case)
        assert result.success
        assert any(line.startswith("WARNING:") and "Weight" in line for line in result.details)

    def test_weight_within_tolerance_passes(self, acme_case, make_record):
        orphan = make_record(PACKING, importer="Acme Import Corp", declared_weight=1080.0)
        result = validate_association(orphan, acme_case)
        assert result.details[-1].startswith("PASS:")

    def test_zero_weight_not_compared(self, acme_case, make_record):
        orphan = make_record(PACKING, importer="Acme Import Corp", declared_weight=0.0)
        result = validate_association(orphan, acme_case)
        assert not any("Weight" in line for line in result.details)
