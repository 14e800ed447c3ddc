"""Tests for document type and source classification."""

import pytest

from tradedocs.domain.models import DocumentKind, DocumentOrigin
from tradedocs.services.classification import KindProfile, SourceClassifier, TypeClassifier
from tradedocs.services.classification.classifier import filename_has_token


@pytest.fixture
def classifier():
    return TypeClassifier()


# ═══════════════════════════════════════════════════
# Type classification
# ═══════════════════════════════════════════════════

class TestTypeClassifier:
    """Keyword scoring, filename bonus and the confidence floor."""

    def test_invoice(self, classifier, invoice_text):
        result = classifier.classify("invoice_0415.txt", invoice_text)
        assert result.kind is DocumentKind.COMMERCIAL_INVOICE
        assert result.confidence == 100
        assert "commercial invoice" in result.keywords
        assert "filename:invoice" in result.keywords

    def test_bill_of_lading(self, classifier, bill_of_lading_text):
        result = classifier.classify("bl_7654321.txt", bill_of_lading_text)
        assert result.kind is DocumentKind.BILL_OF_LADING
        assert "filename:bl" in result.keywords

    def test_packing_list(self, classifier, packing_list_text):
        result = classifier.classify("packing_list.txt", packing_list_text)
        assert result.kind is DocumentKind.PACKING_LIST

    def test_spanish_sanitary_permit(self, classifier):
        text = "MINISTERIO DE SALUD\nRegistro Sanitario No. 12345\nMINSA"
        result = classifier.classify("permiso.pdf", text)
        assert result.kind is DocumentKind.MINSA_PERMIT

    def test_below_floor_is_unknown(self, classifier):
        result = classifier.classify("notes.txt", "Please see the attached policy")
        # one insurance keyword: 7 points -> 14%
        assert result.confidence == 14
        assert result.kind is DocumentKind.UNKNOWN

    def test_no_keywords(self, classifier):
        result = classifier.classify("notes.txt", "hello world")
        assert result.kind is DocumentKind.UNKNOWN
        assert result.confidence == 0
        assert result.keywords == []

    def test_filename_only(self, classifier):
        result = classifier.classify("invoice.txt", "")
        # keyword 'invoice' found in filename (10) plus filename bonus (20)
        assert result.scores[DocumentKind.COMMERCIAL_INVOICE] == 30
        assert result.confidence == 60
        assert result.kind is DocumentKind.COMMERCIAL_INVOICE

    def test_short_token_must_be_whole_word(self, classifier):
        result = classifier.classify("table_data.txt", "")
        assert result.scores[DocumentKind.BILL_OF_LADING] == 0

    def test_short_token_whole_word(self, classifier):
        result = classifier.classify("BL-123.pdf", "")
        assert result.scores[DocumentKind.BILL_OF_LADING] == 20
        assert result.keywords == ["filename:bl"]

    def test_confidence_capped(self, classifier, bill_of_lading_text):
        result = classifier.classify("bl.txt", bill_of_lading_text)
        assert result.confidence == 100

    def test_tie_goes_to_first_profile(self):
        classifier = TypeClassifier(
            profiles=[
                KindProfile(DocumentKind.PACKING_LIST, 10, ("alpha",)),
                KindProfile(DocumentKind.CERTIFICATE_OF_ORIGIN, 10, ("beta",)),
            ]
        )
        result = classifier.classify("x.txt", "alpha beta")
        assert result.kind is DocumentKind.PACKING_LIST
        assert result.confidence == 20

    def test_deterministic(self, classifier, invoice_text):
        first = classifier.classify("invoice.txt", invoice_text)
        second = classifier.classify("invoice.txt", invoice_text)
        assert first == second

    def test_custom_floor(self, invoice_text):
        classifier = TypeClassifier(confidence_floor=101)
        assert classifier.classify("invoice.txt", invoice_text).kind is DocumentKind.UNKNOWN

    def test_rejects_unknown_profile(self):
        with pytest.raises(ValueError):
            KindProfile(DocumentKind.UNKNOWN, 5, ("x",))

    def test_rejects_zero_full_score(self):
        with pytest.raises(ValueError):
            TypeClassifier(full_confidence_score=0)


class TestFilenameTokens:

    @pytest.mark.parametrize("filename,token,expected", [
        ("bl 123 pdf", "bl", True),
        ("table pdf", "bl", False),
        ("awb scan", "awb", True),
        ("packinglist pdf", "packing", True),
        ("my bill of lading pdf", "bill of lading", True),
    ])
    def test_filename_has_token(self, filename, token, expected):
        assert filename_has_token(filename, token) is expected


# ═══════════════════════════════════════════════════
# Source classification
# ═══════════════════════════════════════════════════

class TestSourceClassifier:

    def test_external_by_default(self, invoice_text):
        assert SourceClassifier().classify(invoice_text) is DocumentOrigin.EXTERNAL

    @pytest.mark.parametrize("text", [
        "Generated by ORION logistics",
        "Sistema Orión - documento interno",
    ])
    def test_marker_case_insensitive(self, text):
        assert SourceClassifier().classify(text) is DocumentOrigin.INTERNAL

    def test_known_shipment_id_exact(self):
        classifier = SourceClassifier()
        assert classifier.classify("Ref: SHP-0001", ["SHP-0001"]) is DocumentOrigin.INTERNAL
        assert classifier.classify("Ref: shp-0001", ["SHP-0001"]) is DocumentOrigin.EXTERNAL

    def test_custom_markers(self):
        classifier = SourceClassifier(markers=["inhouse"])
        assert classifier.classify("INHOUSE copy") is DocumentOrigin.INTERNAL
        assert classifier.classify("orion copy") is DocumentOrigin.EXTERNAL

    def test_empty_ids_ignored(self):
        assert SourceClassifier().classify("text", [""]) is DocumentOrigin.EXTERNAL
