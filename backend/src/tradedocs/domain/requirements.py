"""
Regulatory requirement tables keyed by tariff chapter.

A tariff-code hint such as "0803.90.11" starts with its chapter ("08").
Chapters drive two lookups:
1. Permit rules - which permits must be among a case's documents
2. Chapter checklist - which supporting documents a broker should request

Design Decisions:
- Tables are immutable values built once at startup and injected
- Chapter ranges are inclusive on both ends
- Lookups never raise on odd hints; an unusable hint simply yields nothing
"""

from dataclasses import dataclass

from .models import BASE_DOCUMENT_NAMES, DocumentKind


RECOMMENDED_PACKING_LIST = "Packing List (recommended)"
TRADE_AGREEMENT_ORIGIN = "Certificate of Origin (if a trade agreement applies)"


def chapter_of(tariff_hint: str | None) -> int | None:
    """
    Return the tariff chapter encoded in the first two digits of a hint.

    Non-digit characters are ignored, so "08.03" and "0803" both give 8.
    Returns None if the hint carries fewer than two digits.
    """
    if not tariff_hint:
        return None
    digits = "".join(ch for ch in tariff_hint if ch.isdigit())
    if len(digits) < 2:
        return None
    return int(digits[:2])


@dataclass(frozen=True)
class ChapterRange:
    """Inclusive range of tariff chapters."""
    start: int
    end: int

    def __post_init__(self) -> None:
        if not 1 <= self.start <= 99 or not 1 <= self.end <= 99:
            raise ValueError(f"Chapter bounds must be 1-99, got {self.start}-{self.end}")
        if self.start > self.end:
            raise ValueError(f"Inverted chapter range: {self.start}-{self.end}")

    def __contains__(self, chapter: object) -> bool:
        return isinstance(chapter, int) and self.start <= chapter <= self.end


@dataclass(frozen=True)
class PermitRequirement:
    """A permit and the document kind whose presence satisfies it."""
    name: str
    satisfied_by: DocumentKind


@dataclass(frozen=True)
class PermitRule:
    """Chapters in any of the ranges require every listed permit."""
    name: str
    chapters: tuple[ChapterRange, ...]
    permits: tuple[PermitRequirement, ...]

    def applies_to(self, chapter: int) -> bool:
        return any(chapter in chapter_range for chapter_range in self.chapters)


@dataclass(frozen=True)
class ChapterDocuments:
    """Supporting documents to request for a range of chapters."""
    chapters: ChapterRange
    documents: tuple[str, ...]


@dataclass(frozen=True)
class RequirementTable:
    """
    Permit rules plus the per-chapter document checklist.

    Built by the table loader in the infrastructure layer; the domain
    only reads it.
    """
    permit_rules: tuple[PermitRule, ...] = ()
    chapter_documents: tuple[ChapterDocuments, ...] = ()

    def missing_permits(
        self,
        tariff_hint: str | None,
        present_kinds: set[DocumentKind],
    ) -> list[str]:
        """
        List the permits the chapter requires that no member satisfies.

        Every applicable rule contributes, in table order, without
        duplicates. No usable hint means no permit is asserted missing.
        """
        chapter = chapter_of(tariff_hint)
        if chapter is None:
            return []

        missing: list[str] = []
        for rule in self.permit_rules:
            if not rule.applies_to(chapter):
                continue
            for permit in rule.permits:
                if permit.satisfied_by not in present_kinds and permit.name not in missing:
                    missing.append(permit.name)
        return missing

    def required_documents(self, tariff_hint: str | None) -> list[str]:
        """
        Build the document checklist for a tariff hint.

        Base documents first, then chapter-specific documents, then the
        recommended packing list and, when a hint is given, the trade
        agreement certificate of origin. De-duplicated, order preserved.
        """
        checklist = list(BASE_DOCUMENT_NAMES.values())

        chapter = chapter_of(tariff_hint)
        if chapter is not None:
            for entry in self.chapter_documents:
                if chapter in entry.chapters:
                    checklist.extend(entry.documents)

        checklist.append(RECOMMENDED_PACKING_LIST)
        if tariff_hint and tariff_hint.strip():
            checklist.append(TRADE_AGREEMENT_ORIGIN)

        return list(dict.fromkeys(checklist))
