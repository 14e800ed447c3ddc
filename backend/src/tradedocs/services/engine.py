"""
Compliance engine orchestrator service.

Coordinates the full document pipeline:
1. Field extraction from already-extracted text
2. Type and source classification
3. Case file aggregation and compliance state
4. Cross-document consistency validation
5. Orphan suggestion ranking and association veto

This is the primary interface for callers (HTTP API, CLI). It holds no
mutable state; case files and the unassigned pool belong to the caller.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from tradedocs.config import Settings
from tradedocs.domain.aggregation import (
    UNIDENTIFIED_GROUP,
    CaseAggregator,
    default_id_generator,
    group_key,
    utc_now,
)
from tradedocs.domain.association import rank_suggestions, validate_association
from tradedocs.domain.hashing import compute_text_hash
from tradedocs.domain.models import (
    AssociationResult,
    AssociationSuggestion,
    CaseFile,
    ConsistencyResult,
    DocumentRecord,
)
from tradedocs.domain.requirements import RequirementTable
from tradedocs.domain.validation import validate_cross_consistency
from tradedocs.infrastructure.tables import load_requirement_table

from .classification import FieldExtractor, SourceClassifier, TypeClassifier
from .classification.rules import RuleTrace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssociationOutcome:
    """
    Result of associating an orphan document with a case file.

    `case` is the updated case file when approved and the untouched one
    when rejected.
    """
    result: AssociationResult
    case: CaseFile

    @property
    def accepted(self) -> bool:
        return self.result.success

    def to_dict(self) -> dict[str, Any]:
        return {"result": self.result.to_dict(), "case": self.case.to_dict()}


class ComplianceEngine:
    """
    Orchestrates classification, aggregation and verification.

    Example:
        engine = ComplianceEngine.from_settings(get_settings())

        records = [engine.analyze(name, text) for name, text in uploads]
        cases = engine.build_case_files(records)

        for case in cases:
            if case.consistency:
                print(case.reference, case.consistency.verdict)
    """

    def __init__(
        self,
        requirements: RequirementTable | None = None,
        extractor: FieldExtractor | None = None,
        type_classifier: TypeClassifier | None = None,
        source_classifier: SourceClassifier | None = None,
        id_generator: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize compliance engine.

        Args:
            requirements: Requirement table (bundled table loaded if None)
            extractor: Field extractor (created if None)
            type_classifier: Type classifier (created if None)
            source_classifier: Source classifier (created if None)
            id_generator: Fresh id callable, uuid4 if None
            clock: Current UTC time callable, datetime.now(UTC) if None
        """
        self.requirements = requirements if requirements is not None else load_requirement_table()
        self.extractor = extractor or FieldExtractor()
        self.type_classifier = type_classifier or TypeClassifier()
        self.source_classifier = source_classifier or SourceClassifier()
        self.id_generator = id_generator or default_id_generator
        self.clock = clock or utc_now
        self.aggregator = CaseAggregator(
            requirements=self.requirements,
            id_generator=self.id_generator,
            clock=self.clock,
        )

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: Any) -> "ComplianceEngine":
        """Build an engine from application settings. Fails fast on a bad requirement table."""
        return cls(
            requirements=load_requirement_table(settings.requirements_table_path),
            type_classifier=TypeClassifier(
                filename_bonus=settings.filename_bonus,
                confidence_floor=settings.confidence_floor,
                full_confidence_score=settings.full_confidence_score,
            ),
            source_classifier=SourceClassifier(markers=settings.internal_markers),
            **overrides,
        )

    def analyze(
        self,
        filename: str,
        text: str,
        known_internal_ids: Iterable[str] = (),
    ) -> DocumentRecord:
        """
        Classify one document and extract its fields.

        Never raises on malformed text: misses leave fields empty and low
        confidence yields an unknown kind.
        """
        text = text or ""
        classification = self.type_classifier.classify(filename, text)
        fields = self.extractor.extract(text)
        origin = self.source_classifier.classify(text, known_internal_ids)
        content_hash = compute_text_hash(text) if text.strip() else None

        record = DocumentRecord(
            id=self.id_generator(),
            filename=filename,
            kind=classification.kind,
            confidence=classification.confidence,
            fields=fields,
            origin=origin,
            analyzed_at=self.clock(),
            keywords=classification.keywords,
            content_hash=content_hash,
        )

        logger.info(
            f"Analyzed '{filename}': kind={record.kind.value}, "
            f"confidence={record.confidence}, origin={record.origin.value}"
        )
        return record

    def build_case_files(
        self,
        records: Iterable[DocumentRecord],
        existing_cases: Sequence[CaseFile] = (),
    ) -> list[CaseFile]:
        """
        Aggregate external records into case files, validated where the base pair exists.

        A record whose importer already has one of `existing_cases` is offered
        to that case through the association veto instead of opening a second
        case for the same importer. Returns the updated existing cases first,
        then the new ones. A vetoed record appears in neither and stays an
        orphan.
        """
        open_cases: dict[str, CaseFile] = {}
        for case in existing_cases:
            key = case.importer.strip().lower()
            if key and key != UNIDENTIFIED_GROUP:
                open_cases.setdefault(key, case)

        updated: dict[str, CaseFile] = {}
        fresh: list[DocumentRecord] = []
        for record in records:
            if not record.is_external:
                continue
            key = group_key(record)
            case = open_cases.get(key)
            if case is None:
                fresh.append(record)
                continue
            outcome = self.associate(record, case)
            if outcome.accepted:
                open_cases[key] = updated[key] = outcome.case

        return [*updated.values(), *self.aggregator.build_case_files(fresh)]

    def validate(self, case: CaseFile) -> ConsistencyResult:
        """Run cross-document consistency validation on a case file."""
        result = validate_cross_consistency(case.documents)
        logger.info(f"Case {case.reference}: verdict={result.verdict.value}, score={result.score}")
        return result

    def suggest(self, record: DocumentRecord, cases: Sequence[CaseFile]) -> list[AssociationSuggestion]:
        """Rank existing case files as homes for an orphan document."""
        suggestions = rank_suggestions(record, cases)
        logger.debug(f"'{record.filename}': {len(suggestions)} suggestions")
        return suggestions

    def associate(self, record: DocumentRecord, case: CaseFile) -> AssociationOutcome:
        """
        Vet a proposed association and apply it when approved.

        Approved: the document joins the case, derived fields and the
        consistency result are recomputed. Rejected: the case is returned
        unchanged and the result asks for the document to go back to the pool.
        """
        result = validate_association(record, case)
        if not result.success:
            logger.warning(f"Association of '{record.filename}' with case {case.reference} rejected")
            return AssociationOutcome(result=result, case=case)

        updated = self.aggregator.attach_document(case, record)
        logger.info(
            f"'{record.filename}' associated with case {case.reference}; "
            f"state={updated.compliance_state.value}"
        )
        return AssociationOutcome(result=result, case=updated)

    def required_documents(self, tariff_hint: str | None) -> list[str]:
        """Document checklist for a tariff hint."""
        return self.requirements.required_documents(tariff_hint)

    def trace_extraction(self, text: str) -> dict[str, list[RuleTrace]]:
        """Per-field rule trace, for debugging extraction precedence."""
        return self.extractor.trace(text)
