"""
The compliance decision.

One pure function turns a case file's gaps into its red/yellow/green
state. Nothing else in the code base decides the state.
"""

from collections.abc import Sequence

from .models import ComplianceState


def compliance_state(
    missing_documents: Sequence[str],
    missing_permits: Sequence[str],
) -> ComplianceState:
    """
    Decide the compliance state of a case file.

    Rule:
        red     - any mandatory base document is missing
        yellow  - base documents present, at least one permit missing
        green   - nothing missing
    """
    if missing_documents:
        return ComplianceState.RED
    if missing_permits:
        return ComplianceState.YELLOW
    return ComplianceState.GREEN
