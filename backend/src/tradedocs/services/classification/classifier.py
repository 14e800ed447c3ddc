"""
Document type classification by weighted keyword scoring.

Every document kind has a profile: a keyword weight, a list of keywords
(English and Spanish) and canonical filename tokens. A document's score
for a kind is the weight times the number of keywords found in its text
or filename, plus a bonus when the filename names the kind outright.

Design Decisions:
- Keywords match as plain substrings of lower-cased text
- Filename tokens of 3 characters or fewer must be a whole filename word
  ("bl" must not fire inside "table")
- Ties go to the kind listed first, so profile order is significant
- Below the confidence floor the kind is UNKNOWN and goes to manual review
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from tradedocs.domain.models import DocumentKind

from .normalize import normalize_filename

logger = logging.getLogger(__name__)


DEFAULT_FILENAME_BONUS = 20
DEFAULT_CONFIDENCE_FLOOR = 20
DEFAULT_FULL_CONFIDENCE_SCORE = 50

# Filename tokens at or below this length must match a whole word
SHORT_TOKEN_LENGTH = 3


@dataclass(frozen=True)
class KindProfile:
    """Keyword table entry for one document kind."""
    kind: DocumentKind
    weight: int
    keywords: tuple[str, ...]
    filename_tokens: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.weight <= 0:
            raise ValueError(f"Keyword weight must be positive, got {self.weight}")
        if self.kind is DocumentKind.UNKNOWN:
            raise ValueError("UNKNOWN cannot have a keyword profile")


DEFAULT_PROFILES: tuple[KindProfile, ...] = (
    KindProfile(
        kind=DocumentKind.COMMERCIAL_INVOICE,
        weight=10,
        keywords=(
            "invoice", "commercial invoice", "factura comercial", "factura",
            "proforma", "unit price", "total amount", "bill to", "sold to",
            "incoterms", "fob", "cif", "cfr", "payment terms",
        ),
        filename_tokens=("invoice", "factura"),
    ),
    KindProfile(
        kind=DocumentKind.BILL_OF_LADING,
        weight=10,
        keywords=(
            "bill of lading", "b/l", "conocimiento de embarque", "ocean bill",
            "shipper", "consignee", "notify party", "port of loading",
            "port of discharge", "vessel", "voyage", "container", "seal",
            "freight prepaid", "freight collect", "airway bill", "awb",
            "master air waybill", "house air waybill",
        ),
        filename_tokens=("bl", "bol", "bill of lading", "awb"),
    ),
    KindProfile(
        kind=DocumentKind.CERTIFICATE_OF_ORIGIN,
        weight=8,
        keywords=(
            "certificate of origin", "certificado de origen", "origin",
            "country of origin", "preferential", "tlc", "trade agreement",
            "chamber of commerce", "camara de comercio",
        ),
        filename_tokens=("origin", "origen"),
    ),
    KindProfile(
        kind=DocumentKind.PACKING_LIST,
        weight=8,
        keywords=(
            "packing list", "lista de empaque", "packing", "carton",
            "net weight", "gross weight", "dimensions", "marks and numbers",
            "number of packages", "total packages",
        ),
        filename_tokens=("packing",),
    ),
    KindProfile(
        kind=DocumentKind.MINSA_PERMIT,
        weight=12,
        keywords=(
            "minsa", "ministerio de salud", "registro sanitario",
            "permiso sanitario", "salud", "notificación sanitaria",
            "alimento", "medicamento", "cosmético",
        ),
    ),
    KindProfile(
        kind=DocumentKind.MIDA_PERMIT,
        weight=12,
        keywords=(
            "mida", "ministerio de desarrollo agropecuario", "fitosanitario",
            "zoosanitario", "importación vegetal", "cuarentena agropecuaria",
        ),
    ),
    KindProfile(
        kind=DocumentKind.AUPSA_PERMIT,
        weight=12,
        keywords=(
            "aupsa", "autoridad panameña de seguridad de alimentos",
            "inocuidad alimentaria", "permiso de importación de alimentos",
        ),
    ),
    KindProfile(
        kind=DocumentKind.PHYTOSANITARY_CERTIFICATE,
        weight=9,
        keywords=(
            "phytosanitary certificate", "certificado fitosanitario",
            "plant health", "ippc", "sanidad vegetal",
        ),
    ),
    KindProfile(
        kind=DocumentKind.INSURANCE_POLICY,
        weight=7,
        keywords=(
            "insurance", "policy", "póliza", "seguro", "cobertura", "prima",
            "certificate of insurance", "cargo insurance",
        ),
    ),
)


@dataclass(frozen=True)
class Classification:
    """Most likely kind of a document with its confidence and audit trail."""
    kind: DocumentKind
    confidence: int
    keywords: list[str] = field(default_factory=list)
    scores: dict[DocumentKind, int] = field(default_factory=dict)


def filename_has_token(normalized_filename: str, token: str) -> bool:
    """Check a canonical token against a normalised filename."""
    if len(token) <= SHORT_TOKEN_LENGTH:
        return token in normalized_filename.split()
    return token in normalized_filename


class TypeClassifier:
    """
    Scores text and filename against every kind profile.

    Example:
        classifier = TypeClassifier()
        result = classifier.classify("invoice_0042.txt", text)
        result.kind        # DocumentKind.COMMERCIAL_INVOICE
        result.confidence  # 0-100
    """

    def __init__(
        self,
        profiles: Sequence[KindProfile] | None = None,
        filename_bonus: int = DEFAULT_FILENAME_BONUS,
        confidence_floor: int = DEFAULT_CONFIDENCE_FLOOR,
        full_confidence_score: int = DEFAULT_FULL_CONFIDENCE_SCORE,
    ):
        """
        Initialize classifier.

        Args:
            profiles: Keyword table in tie-break order (DEFAULT_PROFILES if None)
            filename_bonus: Points for a canonical filename token
            confidence_floor: Confidence below which the kind is UNKNOWN
            full_confidence_score: Raw score that maps to 100% confidence
        """
        if full_confidence_score <= 0:
            raise ValueError(f"full_confidence_score must be positive, got {full_confidence_score}")
        self.profiles = tuple(profiles) if profiles is not None else DEFAULT_PROFILES
        self.filename_bonus = filename_bonus
        self.confidence_floor = confidence_floor
        self.full_confidence_score = full_confidence_score

    def score(self, profile: KindProfile, filename: str, text: str) -> tuple[int, list[str]]:
        """Score one profile against normalised filename and lower-cased text."""
        total = 0
        matched: list[str] = []
        for keyword in profile.keywords:
            if keyword in text or keyword in filename:
                total += profile.weight
                matched.append(keyword)

        token = next((t for t in profile.filename_tokens if filename_has_token(filename, t)), None)
        if token is not None:
            total += self.filename_bonus
            matched.append(f"filename:{token}")

        return total, matched

    def classify(self, filename: str, text: str) -> Classification:
        """Pick the highest scoring kind. Pure; never raises on odd input."""
        normalized_filename = normalize_filename(filename or "")
        lowered_text = (text or "").lower()

        scores: dict[DocumentKind, int] = {}
        best_kind = DocumentKind.UNKNOWN
        best_score = 0
        best_keywords: list[str] = []

        for profile in self.profiles:
            total, matched = self.score(profile, normalized_filename, lowered_text)
            scores[profile.kind] = total
            if total > best_score:
                best_kind, best_score, best_keywords = profile.kind, total, matched

        confidence = min(100, round(best_score / self.full_confidence_score * 100))

        if confidence < self.confidence_floor:
            logger.debug(f"'{filename}': top score {best_score} below floor, classified unknown")
            best_kind = DocumentKind.UNKNOWN

        return Classification(
            kind=best_kind,
            confidence=confidence,
            keywords=best_keywords,
            scores=scores,
        )
