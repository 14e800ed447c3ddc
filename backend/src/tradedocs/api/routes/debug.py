"""
Debug endpoints for development and testing.

These endpoints are only available when DEBUG=true.
"""

import logging
from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from tradedocs.api.dependencies import get_engine
from tradedocs.api.schemas import ExtractDebugRequest, ExtractDebugResponse
from tradedocs.config import get_settings
from tradedocs.services.engine import ComplianceEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/debug", tags=["debug"])


@router.post("/extract", response_model=ExtractDebugResponse)
def debug_extract(
    request: ExtractDebugRequest,
    engine: Annotated[ComplianceEngine, Depends(get_engine)],
) -> ExtractDebugResponse:
    """
    Run the extraction rules against text and show every rule's outcome.

    Shows which rule won each field and which lower-priority rules would
    also have matched. Only available in debug mode.
    """
    settings = get_settings()
    if not settings.debug:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Debug endpoints are disabled in production",
        )

    fields = engine.extractor.extract(request.text)
    trace = engine.trace_extraction(request.text)
    logger.debug(f"Extraction trace requested for {len(request.text)} characters")

    return ExtractDebugResponse.model_validate(
        {
            "fields": fields.to_dict(),
            "trace": {name: [asdict(step) for step in steps] for name, steps in trace.items()},
        }
    )
