"""
Cross-document consistency rules for import case files.

This module contains pure functions that compare the commercial invoice
of a case against its transport document (bill of lading / air waybill).
No side effects, no I/O - just business rule validation.

The cross-check validates agreement on:
1. Importer and exporter identity - who is trading
2. Declared weight - what was shipped
3. Declared value - what was billed
4. Country of origin - where the goods come from

Design Decisions:
- Pure functions enable easy unit testing and composition
- Each rule returns a FieldCheck with earned credit and an optional discrepancy
- A check with neither value is skipped; one with a single value counts
  against the score without raising a discrepancy. Zero counts as no value
- Relative tolerances are module constants, shared with the association veto
"""

from collections.abc import Sequence
from dataclasses import dataclass

from .models import (
    ConsistencyResult,
    Discrepancy,
    DocumentRecord,
    Severity,
    Verdict,
)
from .similarity import identity_matches, normalize_identity


# Weight differences up to 5% of the transport weight pass
WEIGHT_TOLERANCE = 0.05

# Weight differences above 10% are critical
WEIGHT_CRITICAL_THRESHOLD = 0.10

# Value differences up to 2% of the invoice value pass
VALUE_TOLERANCE = 0.02

# Check weights
IMPORTER_WEIGHT = 3
EXPORTER_WEIGHT = 3
DECLARED_WEIGHT_WEIGHT = 2
DECLARED_VALUE_WEIGHT = 2
ORIGIN_WEIGHT = 1

APPROVAL_SCORE = 90
OBSERVATION_SCORE = 60


@dataclass
class FieldCheck:
    """
    Result of one weighted field comparison.

    `possible` is 0 for a skipped check, so it drops out of the denominator.
    """
    field_name: str
    possible: int
    earned: int = 0
    discrepancy: Discrepancy | None = None


def relative_difference(value: float, reference: float) -> float:
    """Return |value - reference| as a fraction of the reference."""
    diff = abs(value - reference)
    if reference == 0:
        return 0.0 if diff == 0 else float("inf")
    return diff / abs(reference)


def _one_sided(field_name: str, weight: int, left: object, right: object) -> FieldCheck | None:
    """
    Handle the neither/one-side-only cases shared by every check.

    A declared weight or value of 0 counts as not declared.
    """
    if not left and not right:
        return FieldCheck(field_name=field_name, possible=0)
    if not left or not right:
        return FieldCheck(field_name=field_name, possible=weight)
    return None


def check_identity(
    field_name: str,
    weight: int,
    invoice_value: str | None,
    transport_value: str | None,
) -> FieldCheck:
    """
    Compare a party name on both documents.

    Rule: trimmed, case-insensitive equality or containment either way.
    """
    invoice_value = invoice_value if invoice_value and invoice_value.strip() else None
    transport_value = transport_value if transport_value and transport_value.strip() else None

    partial = _one_sided(field_name, weight, invoice_value, transport_value)
    if partial is not None:
        return partial

    if identity_matches(invoice_value, transport_value):
        return FieldCheck(field_name=field_name, possible=weight, earned=weight)

    return FieldCheck(
        field_name=field_name,
        possible=weight,
        discrepancy=Discrepancy(
            field_name=field_name,
            invoice_value=invoice_value,
            transport_value=transport_value,
            severity=Severity.CRITICAL,
            description=(
                f"{field_name.capitalize()} differs: invoice '{invoice_value}' "
                f"vs transport document '{transport_value}'"
            ),
        ),
    )


def check_weight(invoice_weight: float | None, transport_weight: float | None) -> FieldCheck:
    """
    Compare declared weights against the transport document.

    Rule: |delta| <= 5% of transport weight passes; above 10% is critical,
    anything in between is medium.
    """
    partial = _one_sided("weight", DECLARED_WEIGHT_WEIGHT, invoice_weight, transport_weight)
    if partial is not None:
        return partial

    variance = relative_difference(invoice_weight, transport_weight)
    if variance <= WEIGHT_TOLERANCE:
        return FieldCheck(
            field_name="weight",
            possible=DECLARED_WEIGHT_WEIGHT,
            earned=DECLARED_WEIGHT_WEIGHT,
        )

    severity = Severity.CRITICAL if variance > WEIGHT_CRITICAL_THRESHOLD else Severity.MEDIUM
    return FieldCheck(
        field_name="weight",
        possible=DECLARED_WEIGHT_WEIGHT,
        discrepancy=Discrepancy(
            field_name="weight",
            invoice_value=f"{invoice_weight:g} kg",
            transport_value=f"{transport_weight:g} kg",
            severity=severity,
            description=(
                f"Declared weight differs by {variance * 100:.1f}% "
                f"(tolerance {WEIGHT_TOLERANCE * 100:.0f}%)"
            ),
        ),
    )


def check_value(invoice_value: float | None, transport_value: float | None) -> FieldCheck:
    """
    Compare declared values against the invoice.

    Rule: |delta| <= 2% of invoice value passes, otherwise medium.
    """
    partial = _one_sided("value", DECLARED_VALUE_WEIGHT, invoice_value, transport_value)
    if partial is not None:
        return partial

    variance = relative_difference(transport_value, invoice_value)
    if variance <= VALUE_TOLERANCE:
        return FieldCheck(
            field_name="value",
            possible=DECLARED_VALUE_WEIGHT,
            earned=DECLARED_VALUE_WEIGHT,
        )

    return FieldCheck(
        field_name="value",
        possible=DECLARED_VALUE_WEIGHT,
        discrepancy=Discrepancy(
            field_name="value",
            invoice_value=f"{invoice_value:,.2f}",
            transport_value=f"{transport_value:,.2f}",
            severity=Severity.MEDIUM,
            description=(
                f"Declared value differs by {variance * 100:.1f}% "
                f"(tolerance {VALUE_TOLERANCE * 100:.0f}%)"
            ),
        ),
    )


def check_origin(invoice_origin: str | None, transport_origin: str | None) -> FieldCheck:
    """Compare country of origin. Rule: trimmed, case-insensitive equality."""
    invoice_origin = invoice_origin if invoice_origin and invoice_origin.strip() else None
    transport_origin = transport_origin if transport_origin and transport_origin.strip() else None

    partial = _one_sided("origin", ORIGIN_WEIGHT, invoice_origin, transport_origin)
    if partial is not None:
        return partial

    if normalize_identity(invoice_origin) == normalize_identity(transport_origin):
        return FieldCheck(field_name="origin", possible=ORIGIN_WEIGHT, earned=ORIGIN_WEIGHT)

    return FieldCheck(
        field_name="origin",
        possible=ORIGIN_WEIGHT,
        discrepancy=Discrepancy(
            field_name="origin",
            invoice_value=invoice_origin,
            transport_value=transport_origin,
            severity=Severity.MEDIUM,
            description=f"Country of origin differs: '{invoice_origin}' vs '{transport_origin}'",
        ),
    )


def decide_verdict(score: int, consistent: bool) -> Verdict:
    """Map score and consistency to a verdict."""
    if score >= APPROVAL_SCORE and consistent:
        return Verdict.APPROVED
    if score >= OBSERVATION_SCORE:
        return Verdict.OBSERVED
    return Verdict.BLOCKED


def _summarize(verdict: Verdict, score: int, discrepancies: list[Discrepancy]) -> str:
    critical = sum(1 for d in discrepancies if d.is_critical)
    if verdict is Verdict.APPROVED:
        return f"Documents are consistent (score {score}/100)"
    if verdict is Verdict.OBSERVED:
        return (
            f"Documents need review: {len(discrepancies)} discrepancies, "
            f"{critical} critical (score {score}/100)"
        )
    return (
        f"Documents blocked: {len(discrepancies)} discrepancies, "
        f"{critical} critical (score {score}/100)"
    )


def _missing_base_documents(invoice: DocumentRecord | None, transport: DocumentRecord | None) -> ConsistencyResult:
    invoice_state = "present" if invoice else "absent"
    transport_state = "present" if transport else "absent"
    discrepancy = Discrepancy(
        field_name="base_documents",
        invoice_value=invoice_state,
        transport_value=transport_state,
        severity=Severity.CRITICAL,
        description=(
            f"Cross-validation needs both base documents: commercial invoice is "
            f"{invoice_state}, transport document is {transport_state}"
        ),
    )
    return ConsistencyResult(
        consistent=False,
        discrepancies=[discrepancy],
        score=0,
        verdict=Verdict.BLOCKED,
        summary="Documents blocked: base document pair incomplete",
    )


def validate_cross_consistency(documents: Sequence[DocumentRecord]) -> ConsistencyResult:
    """
    Run all cross-document checks and return the consolidated result.

    Uses the first invoice and the first transport document in member order.
    If either is absent the result is forced to blocked with a single
    critical 'base_documents' discrepancy.

    Idempotent: the same member list always gives the same result.
    """
    invoice = next((d for d in documents if d.is_invoice), None)
    transport = next((d for d in documents if d.is_transport), None)

    if invoice is None or transport is None:
        return _missing_base_documents(invoice, transport)

    inv = invoice.fields
    bl = transport.fields
    checks = [
        check_identity("importer", IMPORTER_WEIGHT, inv.importer, bl.importer),
        check_identity("exporter", EXPORTER_WEIGHT, inv.exporter, bl.exporter),
        check_weight(inv.declared_weight, bl.declared_weight),
        check_value(inv.declared_value, bl.declared_value),
        check_origin(inv.country_of_origin, bl.country_of_origin),
    ]

    possible = sum(check.possible for check in checks)
    earned = sum(check.earned for check in checks)
    discrepancies = [check.discrepancy for check in checks if check.discrepancy is not None]

    score = round(100 * earned / possible) if possible else 0
    consistent = not any(d.is_critical for d in discrepancies)
    verdict = decide_verdict(score, consistent)

    return ConsistencyResult(
        consistent=consistent,
        discrepancies=discrepancies,
        score=score,
        verdict=verdict,
        summary=_summarize(verdict, score, discrepancies),
    )
