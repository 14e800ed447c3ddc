"""
Pydantic schemas for API request/response validation.

These schemas define the contract between callers and the engine.
Responses are built from the domain objects' to_dict() output, so the
wire format and the audit format never drift apart.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class DocumentKindEnum(str, Enum):
    """Document kind for API responses."""
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


class ComplianceStateEnum(str, Enum):
    """Case file semaphore."""
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"


class VerdictEnum(str, Enum):
    """Cross-validation verdict."""
    APPROVED = "approved"
    OBSERVED = "observed"
    BLOCKED = "blocked"


# =============================================================================
# Request Schemas
# =============================================================================

class AnalyzeDocumentRequest(BaseModel):
    """Text of one document to classify."""
    filename: str = Field(
        ...,
        min_length=1,
        description="Original filename, used as a classification signal",
    )
    text: str = Field(
        ...,
        description="Text already extracted from the document",
    )
    known_internal_ids: list[str] = Field(
        default_factory=list,
        description="Internal shipment identifiers, added to the configured ones",
    )


class AssociateDocumentRequest(BaseModel):
    """Operator-confirmed association of an orphan with a case file."""
    case_id: str = Field(..., description="Target case file id")


class ExtractDebugRequest(BaseModel):
    """Text to run through the extraction rules."""
    text: str


# =============================================================================
# Response Schemas
# =============================================================================

class ExtractedFieldsResponse(BaseModel):
    document_number: str | None = None
    date: str | None = None
    importer: str | None = None
    exporter: str | None = None
    tariff_hint: str | None = None
    declared_value: float | None = None
    declared_weight: float | None = None
    country_of_origin: str | None = None
    matched_rules: dict[str, str] = {}


class DocumentResponse(BaseModel):
    """A classified document."""
    id: str
    filename: str
    kind: DocumentKindEnum
    confidence: int
    fields: ExtractedFieldsResponse
    origin: str
    analyzed_at: datetime
    keywords: list[str] = []
    content_hash: str | None = None


class DiscrepancyResponse(BaseModel):
    field: str
    invoice_value: str
    transport_value: str
    severity: str
    description: str


class ConsistencyResponse(BaseModel):
    """Cross-document validation result."""
    consistent: bool
    discrepancies: list[DiscrepancyResponse]
    score: int
    verdict: VerdictEnum
    summary: str


class CaseFileResponse(BaseModel):
    """A case file with its derived compliance fields."""
    id: str
    reference: str
    importer: str
    exporter: str
    documents: list[DocumentResponse]
    compliance_state: ComplianceStateEnum
    missing_documents: list[str]
    missing_permits: list[str]
    ready_for_validation: bool
    created_at: datetime
    tariff_hint: str | None = None
    consistency: ConsistencyResponse | None = None


class SuggestionResponse(BaseModel):
    case_id: str
    case_reference: str
    case_importer: str
    score: int
    reasons: list[str] = []


class AssociationResultResponse(BaseModel):
    success: bool
    outcome: str
    details: list[str]
    returned_to_pool: bool
    message: str


class AssociationResponse(BaseModel):
    """Association veto result plus the case file as it now stands."""
    result: AssociationResultResponse
    case: CaseFileResponse


class RequirementsResponse(BaseModel):
    tariff_hint: str | None = None
    documents: list[str]


class RuleTraceResponse(BaseModel):
    rule_name: str
    matched: bool
    raw_text: str | None = None
    parsed: bool = False


class ExtractDebugResponse(BaseModel):
    fields: ExtractedFieldsResponse
    trace: dict[str, list[RuleTraceResponse]]


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str
    permit_rules: int
    cases: int
    unassigned_documents: int


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: str | None = None
