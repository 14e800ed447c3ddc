"""Shared fixtures for the tradedocs test suite."""

import itertools
from datetime import UTC, datetime

import pytest

from tradedocs.domain.models import (
    DocumentKind,
    DocumentOrigin,
    DocumentRecord,
    ExtractedFields,
)
from tradedocs.infrastructure.tables import load_requirement_table
from tradedocs.services.engine import ComplianceEngine


FIXED_NOW = datetime(2024, 3, 15, 12, 0, tzinfo=UTC)


# ═══════════════════════════════════════════════════
# Document texts (shaped like upstream text extraction output)
# ═══════════════════════════════════════════════════

INVOICE_TEXT = """COMMERCIAL INVOICE
Invoice No: INV-2024-0415
Date: 15/03/2024
Sold To: Acme Import Corp
Exporter: Pacific Fruit Exporters S.A.
HS Code: 0803.90.11
Country of Origin: Ecuador
Incoterms: FOB Guayaquil
Payment terms: 30 days
Gross Weight: 1,000 kg
Total Amount: USD 12,500.00
"""

BILL_OF_LADING_TEXT = """BILL OF LADING
B/L No: MSCU7654321
Shipper: Pacific Fruit Exporters S.A.
Consignee: ACME IMPORT CORP
Notify Party: Same as consignee
Vessel: MSC Aurora    Voyage: 412W
Port of Loading: Guayaquil
Port of Discharge: Balboa
Container: MSCU1234567    Seal: 998877
Gross Weight: 1,020 kg
Total Value: USD 12,500.00
Country of Origin: Ecuador
Freight Prepaid
"""

PACKING_LIST_TEXT = """PACKING LIST
Consignee: Acme Import Corp
Number of packages: 120 cartons
Net Weight: 950 kg
Gross Weight: 1,010 kg
Marks and numbers: ACME/GYE
"""

FOREIGN_PACKING_LIST_TEXT = """PACKING LIST
Consignee: Globex Trading Ltd
Gross Weight: 500 kg
"""


@pytest.fixture
def invoice_text():
    return INVOICE_TEXT


@pytest.fixture
def bill_of_lading_text():
    return BILL_OF_LADING_TEXT


@pytest.fixture
def packing_list_text():
    return PACKING_LIST_TEXT


@pytest.fixture
def foreign_packing_list_text():
    return FOREIGN_PACKING_LIST_TEXT


# ═══════════════════════════════════════════════════
# Deterministic collaborators
# ═══════════════════════════════════════════════════

@pytest.fixture
def id_generator():
    """Sequential uuid-shaped ids: 00000001-..., 00000002-..."""
    counter = itertools.count(1)
    return lambda: f"{next(counter):08x}-0000-4000-8000-000000000000"


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture(scope="session")
def requirements():
    return load_requirement_table()


@pytest.fixture
def engine(requirements, id_generator, clock):
    return ComplianceEngine(requirements=requirements, id_generator=id_generator, clock=clock)


# ═══════════════════════════════════════════════════
# Record factory
# ═══════════════════════════════════════════════════

@pytest.fixture
def make_record():
    """Build a DocumentRecord directly, bypassing extraction."""
    counter = itertools.count(1)

    def _make(
        kind: DocumentKind,
        origin: DocumentOrigin = DocumentOrigin.EXTERNAL,
        filename: str | None = None,
        **fields,
    ) -> DocumentRecord:
        n = next(counter)
        return DocumentRecord(
            id=f"doc-{n}",
            filename=filename or f"{kind.value}_{n}.txt",
            kind=kind,
            confidence=80,
            fields=ExtractedFields(**fields),
            origin=origin,
            analyzed_at=FIXED_NOW,
        )

    return _make
