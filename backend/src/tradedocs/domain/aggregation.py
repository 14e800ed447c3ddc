"""
Case file aggregation.

Groups classified external documents into case files by importer and
derives everything a case file reports about itself: missing base
documents, missing permits, the compliance state and the ready flag.

Design Decisions:
- Grouping is exact on the trimmed, lower-cased importer; fuzzy merging
  belongs to the suggestion/association flow
- Derived fields are computed here and nowhere else
- Identifier generation and clock are injected so runs are reproducible
"""

import logging
import uuid
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from datetime import UTC, datetime

from .compliance import compliance_state
from .models import (
    BASE_DOCUMENT_NAMES,
    CaseFile,
    DocumentRecord,
)
from .requirements import RequirementTable
from .validation import validate_cross_consistency


logger = logging.getLogger(__name__)


UNIDENTIFIED_GROUP = "unidentified"
UNIDENTIFIED_PARTY = "Unidentified"
EXTERNAL_REFERENCE_PREFIX = "EXT-"


def default_id_generator() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(UTC)


def group_key(record: DocumentRecord) -> str:
    """Return the grouping key: trimmed, lower-cased importer or 'unidentified'."""
    importer = record.fields.importer
    if importer and importer.strip():
        return importer.strip().lower()
    return UNIDENTIFIED_GROUP


def missing_base_documents(documents: Sequence[DocumentRecord]) -> list[str]:
    present = {doc.kind for doc in documents}
    return [name for kind, name in BASE_DOCUMENT_NAMES.items() if kind not in present]


def select_tariff_hint(documents: Sequence[DocumentRecord]) -> str | None:
    """
    Choose the tariff hint that drives permit requirements.

    First invoice with a hint, else first transport document with a hint,
    else first member with a hint.
    """
    candidates = [
        *(doc for doc in documents if doc.is_invoice),
        *(doc for doc in documents if doc.is_transport),
        *documents,
    ]
    return next((doc.fields.tariff_hint for doc in candidates if doc.fields.tariff_hint), None)


class CaseAggregator:
    """
    Builds and rebuilds case files from document records.

    Example:
        aggregator = CaseAggregator(requirements=table)
        cases = aggregator.build_case_files(records)
    """

    def __init__(
        self,
        requirements: RequirementTable,
        id_generator: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize the aggregator.

        Args:
            requirements: Permit rules and chapter checklist
            id_generator: Returns a fresh unique id (uuid4 if None)
            clock: Returns the current UTC time (datetime.now(UTC) if None)
        """
        self.requirements = requirements
        self.id_generator = id_generator or default_id_generator
        self.clock = clock or utc_now

    def build_case_files(self, records: Iterable[DocumentRecord]) -> list[CaseFile]:
        """
        Group external records by importer into new case files.

        Internal records are ignored. Groups keep first-appearance order,
        and members keep input order within a group.
        """
        groups: dict[str, list[DocumentRecord]] = {}
        for record in records:
            if not record.is_external:
                continue
            groups.setdefault(group_key(record), []).append(record)

        cases = [self._new_case(members) for members in groups.values()]
        logger.info(f"Aggregated {sum(len(g) for g in groups.values())} documents into {len(cases)} case files")
        return cases

    def attach_document(self, case: CaseFile, record: DocumentRecord) -> CaseFile:
        """Return a new case file with the record appended and derived fields recomputed."""
        if any(doc.id == record.id for doc in case.documents):
            return case
        return self._rebuild(case, [*case.documents, record])

    def detach_document(self, case: CaseFile, record_id: str) -> CaseFile:
        """Return a new case file without the given member."""
        remaining = [doc for doc in case.documents if doc.id != record_id]
        if len(remaining) == len(case.documents):
            return case
        return self._rebuild(case, remaining)

    def derive(self, documents: Sequence[DocumentRecord]) -> dict:
        """Compute the derived fields of a member set."""
        missing_documents = missing_base_documents(documents)
        tariff_hint = select_tariff_hint(documents)
        missing_permits = self.requirements.missing_permits(
            tariff_hint,
            {doc.kind for doc in documents},
        )
        state = compliance_state(missing_documents, missing_permits)
        return {
            "tariff_hint": tariff_hint,
            "missing_documents": missing_documents,
            "missing_permits": missing_permits,
            "compliance_state": state,
            "ready_for_validation": not missing_documents and not missing_permits,
        }

    def _reference_for(self, documents: Sequence[DocumentRecord]) -> str:
        first_number = documents[0].fields.document_number if documents else None
        if first_number:
            return first_number
        suffix = self.id_generator().replace("-", "")[:8].upper()
        return f"{EXTERNAL_REFERENCE_PREFIX}{suffix}"

    def _new_case(self, documents: list[DocumentRecord]) -> CaseFile:
        importer = (documents[0].fields.importer or "").strip() or UNIDENTIFIED_PARTY
        exporter = next(
            (doc.fields.exporter for doc in documents if doc.fields.exporter),
            UNIDENTIFIED_PARTY,
        )
        case = CaseFile(
            id=self.id_generator(),
            reference=self._reference_for(documents),
            importer=importer,
            exporter=exporter,
            documents=list(documents),
            created_at=self.clock(),
            **self.derive(documents),
        )
        if case.has_base_pair:
            case = replace(case, consistency=validate_cross_consistency(documents))
        logger.debug(f"Case {case.reference}: {len(documents)} documents, state={case.compliance_state.value}")
        return case

    def _rebuild(self, case: CaseFile, documents: list[DocumentRecord]) -> CaseFile:
        derived = self.derive(documents)
        exporter = case.exporter
        if exporter == UNIDENTIFIED_PARTY:
            exporter = next(
                (doc.fields.exporter for doc in documents if doc.fields.exporter),
                UNIDENTIFIED_PARTY,
            )
        rebuilt = replace(case, documents=documents, exporter=exporter, consistency=None, **derived)
        if rebuilt.has_base_pair:
            rebuilt = replace(rebuilt, consistency=validate_cross_consistency(documents))
        return rebuilt
