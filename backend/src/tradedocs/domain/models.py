"""
Domain models for trade document classification and case verification.

These models represent the records produced by the engine: classified
documents, the case files that group them, and the verdicts computed
over those case files. Every model serializes to plain JSON-friendly
dictionaries so presentation, persistence and audit layers can consume
results without depending on engine internals.

Design Decisions:
- Frozen dataclasses: a record is never mutated after creation, a new
  one is built instead (re-analysis, attaching a document to a case)
- Enums carry their lower-case wire value
- Numeric fields are plain floats; a missing value is None, never 0
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class DocumentKind(Enum):
    """Closed set of document kinds the classifier can recognise."""
    COMMERCIAL_INVOICE = "commercial_invoice"
    BILL_OF_LADING = "bill_of_lading"
    CERTIFICATE_OF_ORIGIN = "certificate_of_origin"
    PACKING_LIST = "packing_list"
    MINSA_PERMIT = "minsa_permit"
    MIDA_PERMIT = "mida_permit"
    AUPSA_PERMIT = "aupsa_permit"
    PHYTOSANITARY_CERTIFICATE = "phytosanitary_certificate"
    INSURANCE_POLICY = "insurance_policy"
    UNKNOWN = "unknown"


# The two mandatory kinds, with the display names used in missing-document lists
BASE_DOCUMENT_NAMES: dict[DocumentKind, str] = {
    DocumentKind.COMMERCIAL_INVOICE: "Commercial Invoice",
    DocumentKind.BILL_OF_LADING: "Bill of Lading / AWB",
}


class DocumentOrigin(Enum):
    """Whether a document came from the internal pipeline or an external upload."""
    INTERNAL = "internal"
    EXTERNAL = "external"


class ComplianceState(Enum):
    """Three-state readiness signal of a case file."""
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"


class Severity(Enum):
    """Severity of a cross-document discrepancy."""
    CRITICAL = "critical"
    MEDIUM = "medium"
    LOW = "low"


class Verdict(Enum):
    """Outcome of a cross-document consistency run."""
    APPROVED = "approved"
    OBSERVED = "observed"
    BLOCKED = "blocked"


class AssociationVerdict(Enum):
    """Outcome of the veto check on a proposed association."""
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ExtractedFields:
    """
    Structured fields pulled from raw document text.

    Every field is optional. A field the extractor could not find stays
    None rather than holding a placeholder that could pass for real data.
    """
    document_number: str | None = None
    date: str | None = None  # As printed on the document, not parsed
    importer: str | None = None
    exporter: str | None = None
    tariff_hint: str | None = None
    declared_value: float | None = None
    declared_weight: float | None = None  # kg
    country_of_origin: str | None = None

    # field name -> name of the pattern rule that produced it
    matched_rules: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "document_number": self.document_number,
            "date": self.date,
            "importer": self.importer,
            "exporter": self.exporter,
            "tariff_hint": self.tariff_hint,
            "declared_value": self.declared_value,
            "declared_weight": self.declared_weight,
            "country_of_origin": self.country_of_origin,
            "matched_rules": dict(self.matched_rules),
        }


@dataclass(frozen=True)
class DocumentRecord:
    """
    One classified document.

    Kind and confidence are a pure function of the (filename, text) input
    and the keyword tables in use. Re-analysing a document produces a new
    record with a new id.
    """
    id: str
    filename: str
    kind: DocumentKind
    confidence: int  # 0-100
    fields: ExtractedFields
    origin: DocumentOrigin
    analyzed_at: datetime
    keywords: list[str] = field(default_factory=list)
    content_hash: str | None = None

    def __post_init__(self) -> None:
        """Validate confidence range."""
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"Confidence must be 0-100, got {self.confidence}")

    @property
    def is_invoice(self) -> bool:
        return self.kind is DocumentKind.COMMERCIAL_INVOICE

    @property
    def is_transport(self) -> bool:
        return self.kind is DocumentKind.BILL_OF_LADING

    @property
    def is_external(self) -> bool:
        return self.origin is DocumentOrigin.EXTERNAL

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "filename": self.filename,
            "kind": self.kind.value,
            "confidence": self.confidence,
            "fields": self.fields.to_dict(),
            "origin": self.origin.value,
            "analyzed_at": self.analyzed_at.isoformat(),
            "keywords": list(self.keywords),
            "content_hash": self.content_hash,
        }


@dataclass(frozen=True)
class Discrepancy:
    """A single field-level mismatch between the invoice and the transport document."""
    field_name: str
    invoice_value: str
    transport_value: str
    severity: Severity
    description: str

    @property
    def is_critical(self) -> bool:
        return self.severity is Severity.CRITICAL

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field_name,
            "invoice_value": self.invoice_value,
            "transport_value": self.transport_value,
            "severity": self.severity.value,
            "description": self.description,
        }


@dataclass(frozen=True)
class ConsistencyResult:
    """
    Outcome of comparing the invoice against the transport document of a case.

    Recomputed on every validation run, never updated incrementally.
    """
    consistent: bool
    discrepancies: list[Discrepancy]
    score: int  # 0-100
    verdict: Verdict
    summary: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "consistent": self.consistent,
            "discrepancies": [d.to_dict() for d in self.discrepancies],
            "score": self.score,
            "verdict": self.verdict.value,
            "summary": self.summary,
        }


@dataclass(frozen=True)
class CaseFile:
    """
    Documents believed to belong to one import transaction.

    Compliance state, missing lists and the ready flag are derived from the
    member set and the requirement table. Only the aggregator computes them;
    adding or removing a member means building a new CaseFile.
    """
    id: str
    reference: str
    importer: str
    exporter: str
    documents: list[DocumentRecord]
    compliance_state: ComplianceState
    missing_documents: list[str]
    missing_permits: list[str]
    ready_for_validation: bool
    created_at: datetime
    tariff_hint: str | None = None
    consistency: ConsistencyResult | None = None

    @property
    def document_kinds(self) -> set[DocumentKind]:
        return {doc.kind for doc in self.documents}

    @property
    def has_base_pair(self) -> bool:
        """True if both an invoice and a transport document are members."""
        kinds = self.document_kinds
        return DocumentKind.COMMERCIAL_INVOICE in kinds and DocumentKind.BILL_OF_LADING in kinds

    def first_of_kind(self, kind: DocumentKind) -> DocumentRecord | None:
        """Return the first member of the given kind, in member order."""
        return next((doc for doc in self.documents if doc.kind is kind), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "reference": self.reference,
            "importer": self.importer,
            "exporter": self.exporter,
            "documents": [doc.to_dict() for doc in self.documents],
            "compliance_state": self.compliance_state.value,
            "missing_documents": list(self.missing_documents),
            "missing_permits": list(self.missing_permits),
            "ready_for_validation": self.ready_for_validation,
            "created_at": self.created_at.isoformat(),
            "tariff_hint": self.tariff_hint,
            "consistency": self.consistency.to_dict() if self.consistency else None,
        }


@dataclass(frozen=True)
class AssociationSuggestion:
    """One ranked candidate case file for an orphan document."""
    case_id: str
    case_reference: str
    case_importer: str
    score: int  # 0-100
    reasons: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "case_id": self.case_id,
            "case_reference": self.case_reference,
            "case_importer": self.case_importer,
            "score": self.score,
            "reasons": list(self.reasons),
        }


@dataclass(frozen=True)
class AssociationResult:
    """
    Result of the veto check for one proposed (document, case file) pairing.

    Detail lines are prefixed PASS, NOTE, WARNING or CRITICAL. Any CRITICAL
    line rejects the association and sends the document back to the pool.
    """
    success: bool
    verdict: AssociationVerdict
    details: list[str]
    returned_to_pool: bool
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "outcome": self.verdict.value,
            "details": list(self.details),
            "returned_to_pool": self.returned_to_pool,
            "message": self.message,
        }
