"""
Orphan document association: suggestion ranking and the veto check.

An orphan is a classified document that no case file claims. The ranker
scores every existing case file against it so an operator can pick one;
the veto then re-checks the chosen pairing before anything is linked.

Design Decisions:
- Ranking is additive over independent signals, capped at 100
- The veto produces itemized PASS/NOTE/WARNING/CRITICAL lines
- Any CRITICAL line rejects the pairing and returns the document to the pool
"""

from collections.abc import Iterable

from .models import (
    AssociationResult,
    AssociationSuggestion,
    AssociationVerdict,
    CaseFile,
    DocumentKind,
    DocumentRecord,
)
from .similarity import dice_similarity, identity_matches, normalize_identity
from .validation import WEIGHT_CRITICAL_THRESHOLD, relative_difference


# Ranker signal points
IMPORTER_EXACT_POINTS = 40
IMPORTER_CONTAINS_POINTS = 30
IMPORTER_SIMILAR_POINTS = 20
EXPORTER_POINTS = 25
TARIFF_SUBHEADING_POINTS = 20
TARIFF_HEADING_POINTS = 10
REFERENCE_POINTS = 35
ORIGIN_POINTS = 10

# Dice similarity above this counts as a similar importer
SIMILARITY_THRESHOLD = 0.6

# Weight deviation that raises a warning during association
ASSOCIATION_WEIGHT_TOLERANCE = WEIGHT_CRITICAL_THRESHOLD

PASS = "PASS"
NOTE = "NOTE"
WARNING = "WARNING"
CRITICAL = "CRITICAL"


def _digits(value: str | None) -> str:
    return "".join(ch for ch in value if ch.isdigit()) if value else ""


def _importer_signal(document_importer: str | None, case_importer: str) -> tuple[int, str | None]:
    if not document_importer or not document_importer.strip():
        return 0, None
    doc_name = normalize_identity(document_importer)
    case_name = normalize_identity(case_importer)
    if not case_name:
        return 0, None
    if doc_name == case_name:
        return IMPORTER_EXACT_POINTS, f"Importer matches exactly: {case_importer}"
    if doc_name in case_name or case_name in doc_name:
        return IMPORTER_CONTAINS_POINTS, f"Importer partially matches: {case_importer}"
    similarity = dice_similarity(doc_name, case_name)
    if similarity > SIMILARITY_THRESHOLD:
        return IMPORTER_SIMILAR_POINTS, f"Importer is similar ({similarity:.0%}): {case_importer}"
    return 0, None


def _tariff_signal(document_hint: str | None, case_hint: str | None) -> tuple[int, str | None]:
    doc_digits = _digits(document_hint)
    case_digits = _digits(case_hint)
    if len(doc_digits) >= 6 and len(case_digits) >= 6 and doc_digits[:6] == case_digits[:6]:
        return TARIFF_SUBHEADING_POINTS, f"Same tariff subheading: {doc_digits[:6]}"
    if len(doc_digits) >= 4 and len(case_digits) >= 4 and doc_digits[:4] == case_digits[:4]:
        return TARIFF_HEADING_POINTS, f"Same tariff heading: {doc_digits[:4]}"
    return 0, None


def score_case(record: DocumentRecord, case: CaseFile) -> AssociationSuggestion:
    """Score one case file against an orphan document."""
    fields = record.fields
    score = 0
    reasons: list[str] = []

    points, reason = _importer_signal(fields.importer, case.importer)
    score += points
    if reason:
        reasons.append(reason)

    if fields.exporter and any(
        doc.fields.exporter and identity_matches(fields.exporter, doc.fields.exporter)
        for doc in case.documents
    ):
        score += EXPORTER_POINTS
        reasons.append(f"Exporter matches: {fields.exporter}")

    points, reason = _tariff_signal(fields.tariff_hint, case.tariff_hint)
    score += points
    if reason:
        reasons.append(reason)

    number = normalize_identity(fields.document_number) if fields.document_number else ""
    reference = normalize_identity(case.reference)
    if number and reference and (number in reference or reference in number):
        score += REFERENCE_POINTS
        reasons.append(f"Document number matches case reference {case.reference}")

    if fields.country_of_origin and any(
        doc.fields.country_of_origin
        and normalize_identity(doc.fields.country_of_origin) == normalize_identity(fields.country_of_origin)
        for doc in case.documents
    ):
        score += ORIGIN_POINTS
        reasons.append(f"Same country of origin: {fields.country_of_origin}")

    return AssociationSuggestion(
        case_id=case.id,
        case_reference=case.reference,
        case_importer=case.importer,
        score=min(100, score),
        reasons=reasons,
    )


def rank_suggestions(record: DocumentRecord, cases: Iterable[CaseFile]) -> list[AssociationSuggestion]:
    """
    Rank existing case files as homes for an orphan document.

    Zero-score cases are dropped. Sorted by score descending; equal scores
    keep the input order.
    """
    suggestions = [score_case(record, case) for case in cases]
    ranked = [s for s in suggestions if s.score > 0]
    ranked.sort(key=lambda s: s.score, reverse=True)
    return ranked


def validate_association(record: DocumentRecord, case: CaseFile) -> AssociationResult:
    """
    Re-check a proposed (document, case file) pairing.

    Rules:
    - Importer must match the case importer when both are declared (CRITICAL)
    - A kind already present in the case is noted, not blocked
    - An invoice's exporter must match a member exporter when both exist (CRITICAL)
    - Weight more than 10% off the transport document is a warning
    """
    fields = record.fields
    details: list[str] = []

    if fields.importer and fields.importer.strip() and case.importer.strip():
        if identity_matches(fields.importer, case.importer):
            details.append(f"{PASS}: Importer '{fields.importer}' matches case importer '{case.importer}'")
        else:
            details.append(
                f"{CRITICAL}: Importer '{fields.importer}' does not match case importer '{case.importer}'"
            )
    elif not fields.importer or not fields.importer.strip():
        details.append(f"{WARNING}: Document declares no importer; identity could not be verified")

    if record.kind is not DocumentKind.UNKNOWN and record.kind in case.document_kinds:
        details.append(f"{NOTE}: Case already holds a {record.kind.value} document")

    if record.is_invoice and fields.exporter:
        member_exporters = [doc.fields.exporter for doc in case.documents if doc.fields.exporter]
        if member_exporters:
            if any(identity_matches(fields.exporter, exporter) for exporter in member_exporters):
                details.append(f"{PASS}: Exporter '{fields.exporter}' matches the case")
            else:
                details.append(
                    f"{CRITICAL}: Exporter '{fields.exporter}' does not match any exporter in the case"
                )

    transport = case.first_of_kind(DocumentKind.BILL_OF_LADING)
    if fields.declared_weight and transport and transport.fields.declared_weight:
        variance = relative_difference(fields.declared_weight, transport.fields.declared_weight)
        if variance > ASSOCIATION_WEIGHT_TOLERANCE:
            details.append(
                f"{WARNING}: Weight {fields.declared_weight:g} kg differs {variance * 100:.1f}% "
                f"from transport document ({transport.fields.declared_weight:g} kg)"
            )
        else:
            details.append(f"{PASS}: Weight consistent with transport document")

    rejected = any(line.startswith(f"{CRITICAL}:") for line in details)
    if rejected:
        return AssociationResult(
            success=False,
            verdict=AssociationVerdict.REJECTED,
            details=details,
            returned_to_pool=True,
            message=f"Association with case {case.reference} rejected; document returned to the unassigned pool",
        )

    return AssociationResult(
        success=True,
        verdict=AssociationVerdict.APPROVED,
        details=details,
        returned_to_pool=False,
        message=f"Document associated with case {case.reference}",
    )
