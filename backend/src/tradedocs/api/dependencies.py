"""
Shared service instances for the API routes.

Created lazily on first use; tests replace them through
app.dependency_overrides.
"""

import logging

from tradedocs.config import get_settings
from tradedocs.infrastructure.store import CaseStore, InMemoryCaseStore
from tradedocs.services.engine import ComplianceEngine

logger = logging.getLogger(__name__)


_engine: ComplianceEngine | None = None
_store: CaseStore | None = None


def get_engine() -> ComplianceEngine:
    """Get or create the compliance engine."""
    global _engine
    if _engine is None:
        _engine = ComplianceEngine.from_settings(get_settings())
        logger.info("Compliance engine initialized")
    return _engine


def get_store() -> CaseStore:
    """Get or create the case store."""
    global _store
    if _store is None:
        _store = InMemoryCaseStore()
    return _store
