"""
Field extraction from raw document text using ordered pattern rules.

This module pulls the fields a case file needs out of already-extracted
text:
1. Identification - document number and date
2. Parties - importer and exporter
3. Goods - tariff-code hint, declared value, declared weight, origin

Works on English and Spanish labels as they appear on Latin American
import paperwork. Every field is optional; an unmatched field stays None.
"""

import logging
from dataclasses import dataclass

from tradedocs.domain.models import ExtractedFields

from .normalize import parse_number
from .rules import FieldMatch, PatternRule, RuleChain, RuleTrace

logger = logging.getLogger(__name__)


# =============================================================================
# Pattern rules per field, highest priority first
# =============================================================================

DOCUMENT_NUMBER_RULES = (
    PatternRule.compile("invoice_number", r"\binvoice\s*(?:no|#|number|num)\.?\s*:?\s*([A-Z0-9\-/]*\d[A-Z0-9\-/]*)"),
    PatternRule.compile("bl_number", r"\bb/l\s*(?:no|#|number)?\.?\s*:?\s*([A-Z0-9\-]*\d[A-Z0-9\-]*)"),
    PatternRule.compile("awb_number", r"\b(?:awb|air\s*waybill)\s*(?:no|#|number)?\.?\s*:?\s*([A-Z0-9\-]*\d[A-Z0-9\-]*)"),
    PatternRule.compile("document_number", r"\bdoc(?:ument)?\s*(?:no|#|number)\.?\s*:?\s*([A-Z0-9\-/]*\d[A-Z0-9\-/]*)"),
    PatternRule.compile("reference", r"\bref(?:erence)?\.?\s*:?\s*([A-Z0-9\-/]*\d[A-Z0-9\-/]*)"),
    PatternRule.compile("numero", r"\bN[°ºo]\.?\s*:?\s*([A-Z0-9\-/]*\d[A-Z0-9\-/]*)"),
)

DATE_RULES = (
    PatternRule.compile("labelled_date", r"\bdate\s*:?\s*(\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4})"),
    PatternRule.compile("fecha", r"\bfecha\s*:?\s*(\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4})"),
    PatternRule.compile("iso_date", r"\b(\d{4}-\d{2}-\d{2})\b"),
    PatternRule.compile("month_name_date", r"\b(\d{2}[/\-][A-Za-z]{3}[/\-]\d{4})\b"),
)

IMPORTER_RULES = (
    PatternRule.compile("consignee", r"\b(?:consignee|importer|importador|destinatario)\b[ \t]*(?::[ \t]*\n?[ \t]*|[ \t])([^\n]{3,60})"),
    PatternRule.compile("buyer", r"\b(?:bill\s*to|sold\s*to|buyer|comprador)\b[ \t]*(?::[ \t]*\n?[ \t]*|[ \t])([^\n]{3,60})"),
)

EXPORTER_RULES = (
    PatternRule.compile("shipper", r"\b(?:shipper|exporter|exportador|remitente)\b[ \t]*(?::[ \t]*\n?[ \t]*|[ \t])([^\n]{3,60})"),
    PatternRule.compile("seller", r"\b(?:seller|vendedor|ship\s*from)\b[ \t]*(?::[ \t]*\n?[ \t]*|[ \t])([^\n]{3,60})"),
)

TARIFF_RULES = (
    PatternRule.compile(
        "hs_code",
        r"\b(?:hs\s*code|partida(?:\s*arancelaria)?|tariff(?:\s*code)?|arancel)\s*:?\s*(\d{4}(?:[. ]?\d{2}){1,2})",
    ),
    # Unlabelled codes, e.g. in a goods description line
    PatternRule.compile("dotted_code", r"\b(\d{4}\.\d{2}\.\d{2})\b"),
    PatternRule.compile("bare_code", r"\b(\d{8,10})\b"),
)

VALUE_RULES = (
    PatternRule.compile(
        "total_value",
        r"\b(?:total\s*(?:amount|value)|valor\s*total|grand\s*total)\s*:?\s*(?:USD|US\$|\$)?\s*([\d,]+(?:\.\d+)?)",
    ),
    PatternRule.compile(
        "incoterm_value",
        r"\b(?:fob|cif|cfr)\b\s*(?:value)?\s*:?\s*(?:USD|US\$|\$)?\s*(\d[\d,]*(?:\.\d+)?)",
    ),
)

WEIGHT_RULES = (
    PatternRule.compile(
        "gross_weight",
        r"\b(?:gross\s*weight|peso\s*bruto|total\s*weight)\s*:?\s*([\d,]+(?:\.\d+)?)\s*(?:kg|kgs)?",
    ),
    PatternRule.compile(
        "net_weight",
        r"\b(?:net\s*weight|peso\s*neto)\s*:?\s*([\d,]+(?:\.\d+)?)\s*(?:kg|kgs)?",
    ),
)

ORIGIN_RULES = (
    PatternRule.compile(
        "country_of_origin",
        r"\b(?:country\s*of\s*origin|pa[ií]s\s*de\s*origen|origin)\s*:[ \t]*([A-Za-z][A-Za-z \t]{1,29})",
    ),
    PatternRule.compile(
        "made_in",
        r"\b(?:made\s*in|fabricado\s*en)\s*:?[ \t]*([A-Za-z][A-Za-z \t]{1,29})",
    ),
)


@dataclass(frozen=True)
class FieldRules:
    """The full set of rule chains the extractor evaluates."""
    document_number: RuleChain[str]
    date: RuleChain[str]
    importer: RuleChain[str]
    exporter: RuleChain[str]
    tariff_hint: RuleChain[str]
    declared_value: RuleChain[float]
    declared_weight: RuleChain[float]
    country_of_origin: RuleChain[str]

    def chains(self) -> list[RuleChain]:
        return [
            self.document_number,
            self.date,
            self.importer,
            self.exporter,
            self.tariff_hint,
            self.declared_value,
            self.declared_weight,
            self.country_of_origin,
        ]


DEFAULT_FIELD_RULES = FieldRules(
    document_number=RuleChain("document_number", DOCUMENT_NUMBER_RULES),
    date=RuleChain("date", DATE_RULES),
    importer=RuleChain("importer", IMPORTER_RULES),
    exporter=RuleChain("exporter", EXPORTER_RULES),
    tariff_hint=RuleChain("tariff_hint", TARIFF_RULES),
    declared_value=RuleChain("declared_value", VALUE_RULES, parser=parse_number),
    declared_weight=RuleChain("declared_weight", WEIGHT_RULES, parser=parse_number),
    country_of_origin=RuleChain("country_of_origin", ORIGIN_RULES),
)


class FieldExtractor:
    """
    Extracts structured fields from raw text.

    Example:
        extractor = FieldExtractor()
        fields = extractor.extract("COMMERCIAL INVOICE\\nInvoice No: INV-001\\n...")
        fields.document_number  # "INV-001"
    """

    def __init__(self, rules: FieldRules | None = None):
        self.rules = rules or DEFAULT_FIELD_RULES

    def extract(self, text: str) -> ExtractedFields:
        """Run every rule chain against the text. Pure; never raises on odd input."""
        if not text:
            return ExtractedFields()

        matches: dict[str, FieldMatch] = {
            chain.field_name: chain.evaluate(text) for chain in self.rules.chains()
        }

        matched_rules = {
            name: match.rule_name
            for name, match in matches.items()
            if match.success and match.rule_name
        }
        logger.debug(f"Extracted {len(matched_rules)} fields: {sorted(matched_rules)}")

        return ExtractedFields(
            document_number=matches["document_number"].value,
            date=matches["date"].value,
            importer=matches["importer"].value,
            exporter=matches["exporter"].value,
            tariff_hint=matches["tariff_hint"].value,
            declared_value=matches["declared_value"].value,
            declared_weight=matches["declared_weight"].value,
            country_of_origin=matches["country_of_origin"].value,
            matched_rules=matched_rules,
        )

    def trace(self, text: str) -> dict[str, list[RuleTrace]]:
        """Per-field, per-rule evaluation trace for debugging extraction precedence."""
        return {chain.field_name: chain.trace(text or "") for chain in self.rules.chains()}
