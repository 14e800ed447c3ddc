"""
Document intake and orphan association endpoints.

Handles analysis of incoming document text, the unassigned pool,
suggestion ranking and the association veto.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from tradedocs.api.dependencies import get_engine, get_store
from tradedocs.api.schemas import (
    AnalyzeDocumentRequest,
    AssociateDocumentRequest,
    AssociationResponse,
    DocumentResponse,
    SuggestionResponse,
)
from tradedocs.config import get_settings
from tradedocs.domain.models import DocumentRecord
from tradedocs.infrastructure.store import CaseStore, DuplicateDocumentError
from tradedocs.services.engine import ComplianceEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


def _pooled_document(store: CaseStore, document_id: str) -> DocumentRecord:
    record = store.get_document(document_id)
    if record is None or not store.is_unassigned(document_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Document {document_id} is not in the unassigned pool",
        )
    return record


@router.post(
    "",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Same content already received"}},
)
def analyze_document(
    request: AnalyzeDocumentRequest,
    engine: Annotated[ComplianceEngine, Depends(get_engine)],
    store: Annotated[CaseStore, Depends(get_store)],
) -> DocumentResponse:
    """
    Classify one document and take it in.

    External documents join the unassigned pool until they are aggregated
    into a case file or associated with one.
    """
    settings = get_settings()
    known_ids = [*settings.known_internal_ids, *request.known_internal_ids]

    record = engine.analyze(request.filename, request.text, known_ids)

    try:
        store.add_document(record, pooled=record.is_external)
    except DuplicateDocumentError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Duplicate document: same content as {e.existing_id}",
        )

    return DocumentResponse.model_validate(record.to_dict())


@router.get("/unassigned", response_model=list[DocumentResponse])
def list_unassigned(
    store: Annotated[CaseStore, Depends(get_store)],
) -> list[DocumentResponse]:
    """List orphan documents waiting for a case file."""
    return [DocumentResponse.model_validate(r.to_dict()) for r in store.unassigned()]


@router.get("/{document_id}/suggestions", response_model=list[SuggestionResponse])
def suggest_cases(
    document_id: str,
    engine: Annotated[ComplianceEngine, Depends(get_engine)],
    store: Annotated[CaseStore, Depends(get_store)],
) -> list[SuggestionResponse]:
    """Rank existing case files for an orphan document."""
    record = _pooled_document(store, document_id)
    suggestions = engine.suggest(record, store.cases())
    return [SuggestionResponse.model_validate(s.to_dict()) for s in suggestions]


@router.post("/{document_id}/associate", response_model=AssociationResponse)
def associate_document(
    document_id: str,
    request: AssociateDocumentRequest,
    engine: Annotated[ComplianceEngine, Depends(get_engine)],
    store: Annotated[CaseStore, Depends(get_store)],
) -> AssociationResponse:
    """
    Attach an orphan document to a case file, subject to veto.

    Approved: the document leaves the pool and the updated case file is
    saved. Rejected: the document stays in the pool and the case file is
    untouched; the itemized reasons are returned either way.
    """
    record = _pooled_document(store, document_id)
    case = store.get_case(request.case_id)
    if case is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Case file {request.case_id} not found",
        )

    outcome = engine.associate(record, case)
    if outcome.accepted:
        store.save_case(outcome.case)
        store.release(document_id)

    return AssociationResponse.model_validate(outcome.to_dict())
