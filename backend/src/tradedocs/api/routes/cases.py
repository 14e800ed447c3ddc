"""
Case file endpoints.

Aggregation of pooled documents into case files, retrieval, on-demand
cross-validation and the requirement checklist.
"""

import logging
from dataclasses import replace
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tradedocs.api.dependencies import get_engine, get_store
from tradedocs.api.schemas import (
    CaseFileResponse,
    ConsistencyResponse,
    RequirementsResponse,
)
from tradedocs.domain.models import CaseFile
from tradedocs.infrastructure.store import CaseStore
from tradedocs.services.engine import ComplianceEngine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["cases"])


def _case_or_404(store: CaseStore, case_id: str) -> CaseFile:
    case = store.get_case(case_id)
    if case is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Case file {case_id} not found",
        )
    return case


@router.post("/cases/aggregate", response_model=list[CaseFileResponse])
def aggregate_cases(
    engine: Annotated[ComplianceEngine, Depends(get_engine)],
    store: Annotated[CaseStore, Depends(get_store)],
) -> list[CaseFileResponse]:
    """
    Group every pooled external document into case files.

    A document whose importer already has a case file is offered to that
    case through the association veto; vetoed documents stay pooled. The
    rest open new case files, cross-validated where both base documents
    are present. Aggregated documents leave the pool.
    """
    pooled = [record for record in store.unassigned() if record.is_external]
    cases = engine.build_case_files(pooled, existing_cases=store.cases())

    for case in cases:
        store.save_case(case)
        for record in case.documents:
            store.release(record.id)

    logger.info(f"Aggregated {len(pooled)} pooled documents; {len(cases)} case files created or updated")
    return [CaseFileResponse.model_validate(case.to_dict()) for case in cases]


@router.get("/cases", response_model=list[CaseFileResponse])
def list_cases(
    store: Annotated[CaseStore, Depends(get_store)],
) -> list[CaseFileResponse]:
    return [CaseFileResponse.model_validate(case.to_dict()) for case in store.cases()]


@router.get("/cases/{case_id}", response_model=CaseFileResponse)
def get_case(
    case_id: str,
    store: Annotated[CaseStore, Depends(get_store)],
) -> CaseFileResponse:
    return CaseFileResponse.model_validate(_case_or_404(store, case_id).to_dict())


@router.post("/cases/{case_id}/validation", response_model=ConsistencyResponse)
def validate_case(
    case_id: str,
    engine: Annotated[ComplianceEngine, Depends(get_engine)],
    store: Annotated[CaseStore, Depends(get_store)],
) -> ConsistencyResponse:
    """Re-run cross-document validation and record the result on the case file."""
    case = _case_or_404(store, case_id)
    result = engine.validate(case)
    store.save_case(replace(case, consistency=result))
    return ConsistencyResponse.model_validate(result.to_dict())


@router.get("/requirements", response_model=RequirementsResponse)
def required_documents(
    engine: Annotated[ComplianceEngine, Depends(get_engine)],
    tariff_hint: Annotated[str | None, Query(description="Tariff code hint, e.g. 0803.90")] = None,
) -> RequirementsResponse:
    """Document checklist for a tariff hint."""
    return RequirementsResponse(
        tariff_hint=tariff_hint,
        documents=engine.required_documents(tariff_hint),
    )
