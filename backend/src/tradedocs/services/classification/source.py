"""
Source classification: internal pipeline or external upload.

Documents produced by the internal shipment pipeline carry a marker
token in their text or quote an internal shipment identifier. Everything
else is treated as an external upload and flows into case aggregation.
"""

import logging
from collections.abc import Iterable

from tradedocs.domain.models import DocumentOrigin

logger = logging.getLogger(__name__)


DEFAULT_INTERNAL_MARKERS = ("orion", "orión")


class SourceClassifier:
    """Decides the origin of a document from its text."""

    def __init__(self, markers: Iterable[str] | None = None):
        source = DEFAULT_INTERNAL_MARKERS if markers is None else markers
        self.markers = tuple(m.lower() for m in source if m)

    def classify(self, text: str, known_internal_ids: Iterable[str] = ()) -> DocumentOrigin:
        """
        Return INTERNAL if the text carries a marker or a known shipment id.

        Markers match case-insensitively; shipment ids must appear verbatim.
        """
        text = text or ""
        lowered = text.lower()

        if any(marker in lowered for marker in self.markers):
            return DocumentOrigin.INTERNAL

        for shipment_id in known_internal_ids:
            if shipment_id and shipment_id in text:
                logger.debug(f"Internal shipment id '{shipment_id}' found in text")
                return DocumentOrigin.INTERNAL

        return DocumentOrigin.EXTERNAL
