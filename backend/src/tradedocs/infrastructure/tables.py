"""
Loader for the requirement table data file.

Permit rules and the chapter document checklist live in a JSON file so
regulatory changes do not need a release. The bundled table is used
unless configuration points at another file.

Design Decisions:
- Pydantic models validate the file shape; the domain never sees raw JSON
- Any problem (missing file, bad JSON, bad shape) raises
  RequirementTableError at startup, never later during a request
- The result is an immutable domain RequirementTable
"""

import json
import logging
from importlib import resources
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from tradedocs.domain.models import DocumentKind
from tradedocs.domain.requirements import (
    ChapterDocuments,
    ChapterRange,
    PermitRequirement,
    PermitRule,
    RequirementTable,
)

logger = logging.getLogger(__name__)


BUNDLED_TABLE = "requirements.json"


class RequirementTableError(Exception):
    """Raised when the requirement table cannot be read or is invalid."""


# =============================================================================
# File schema
# =============================================================================

class ChapterRangeModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    start: int = Field(ge=1, le=99)
    end: int = Field(ge=1, le=99)

    @model_validator(mode="after")
    def check_order(self) -> "ChapterRangeModel":
        if self.start > self.end:
            raise ValueError(f"Inverted chapter range: {self.start}-{self.end}")
        return self

    def to_domain(self) -> ChapterRange:
        return ChapterRange(start=self.start, end=self.end)


class PermitModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    satisfied_by: DocumentKind

    @model_validator(mode="after")
    def check_kind(self) -> "PermitModel":
        if self.satisfied_by is DocumentKind.UNKNOWN:
            raise ValueError("A permit cannot be satisfied by an unknown document")
        return self


class PermitRuleModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    chapters: list[ChapterRangeModel] = Field(min_length=1)
    permits: list[PermitModel] = Field(min_length=1)

    def to_domain(self) -> PermitRule:
        return PermitRule(
            name=self.name,
            chapters=tuple(c.to_domain() for c in self.chapters),
            permits=tuple(
                PermitRequirement(name=p.name, satisfied_by=p.satisfied_by) for p in self.permits
            ),
        )


class ChapterDocumentsModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    chapters: ChapterRangeModel
    documents: list[str] = Field(min_length=1)

    def to_domain(self) -> ChapterDocuments:
        return ChapterDocuments(chapters=self.chapters.to_domain(), documents=tuple(self.documents))


class RequirementTableModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    permit_rules: list[PermitRuleModel] = Field(default_factory=list)
    chapter_documents: list[ChapterDocumentsModel] = Field(default_factory=list)

    def to_domain(self) -> RequirementTable:
        return RequirementTable(
            permit_rules=tuple(rule.to_domain() for rule in self.permit_rules),
            chapter_documents=tuple(entry.to_domain() for entry in self.chapter_documents),
        )


# =============================================================================
# Loading
# =============================================================================

def _read_source(path: Path | None) -> tuple[str, str]:
    if path is None:
        resource = resources.files("tradedocs").joinpath("data", BUNDLED_TABLE)
        return resource.read_text(encoding="utf-8"), f"bundled {BUNDLED_TABLE}"
    return path.read_text(encoding="utf-8"), str(path)


def parse_requirement_table(raw: str, source: str = "<string>") -> RequirementTable:
    """Validate JSON text and build the domain table."""
    try:
        model = RequirementTableModel.model_validate(json.loads(raw))
    except json.JSONDecodeError as e:
        raise RequirementTableError(f"Requirement table {source} is not valid JSON: {e}") from e
    except ValidationError as e:
        raise RequirementTableError(f"Requirement table {source} is invalid: {e}") from e
    return model.to_domain()


def load_requirement_table(path: Path | None = None) -> RequirementTable:
    """
    Load the requirement table from a file, or the bundled one if path is None.

    Raises:
        RequirementTableError: If the file cannot be read or fails validation
    """
    try:
        raw, source = _read_source(path)
    except OSError as e:
        raise RequirementTableError(f"Cannot read requirement table {path}: {e}") from e

    table = parse_requirement_table(raw, source)
    logger.info(
        f"Loaded requirement table from {source}: "
        f"{len(table.permit_rules)} permit rules, {len(table.chapter_documents)} chapter checklists"
    )
    return table
