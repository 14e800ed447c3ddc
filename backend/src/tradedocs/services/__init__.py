"""
Services package - Document classification and the compliance engine.
"""

from .engine import AssociationOutcome, ComplianceEngine

__all__ = ["AssociationOutcome", "ComplianceEngine"]
