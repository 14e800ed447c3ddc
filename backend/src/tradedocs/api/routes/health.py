"""
Health check endpoint.

Provides system health status for monitoring and load balancers.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from tradedocs import __version__
from tradedocs.api.dependencies import get_engine, get_store
from tradedocs.api.schemas import HealthResponse
from tradedocs.infrastructure.store import CaseStore
from tradedocs.services.engine import ComplianceEngine

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check(
    engine: Annotated[ComplianceEngine, Depends(get_engine)],
    store: Annotated[CaseStore, Depends(get_store)],
) -> HealthResponse:
    """
    Check system health.

    Reports the loaded requirement table size and store occupancy.
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        permit_rules=len(engine.requirements.permit_rules),
        cases=len(store.cases()),
        unassigned_documents=len(store.unassigned()),
    )
