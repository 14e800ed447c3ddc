"""
Ordered pattern rules for field extraction.

Each extracted field owns a RuleChain: a list of PatternRules tried in
priority order. The first rule whose pattern matches wins, which makes
extraction precedence explicit and auditable (the winning rule name is
recorded on the result).

Design Decisions:
- Rules are immutable; chains are built once at import time
- A matched value that fails to parse ends the chain with an empty
  result, lower-priority rules are not consulted
- Evaluation can be traced rule by rule for debugging
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field

from .normalize import clean_capture

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatternRule:
    """A named regex whose first capture group holds the field value."""
    name: str
    pattern: re.Pattern[str]

    @classmethod
    def compile(cls, name: str, pattern: str, flags: int = re.IGNORECASE) -> "PatternRule":
        return cls(name=name, pattern=re.compile(pattern, flags))

    def search(self, text: str) -> str | None:
        """Return the cleaned capture, or None if the pattern does not match."""
        match = self.pattern.search(text)
        if not match:
            return None
        captured = clean_capture(match.group(1))
        return captured or None


@dataclass
class FieldMatch[T]:
    """Outcome of evaluating one rule chain against a text."""
    value: T | None
    rule_name: str | None = None
    raw_text: str | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class RuleTrace:
    """One step of a traced chain evaluation."""
    rule_name: str
    matched: bool
    raw_text: str | None = None
    parsed: bool = False


def _identity(raw: str) -> str | None:
    return raw


@dataclass(frozen=True)
class RuleChain[T]:
    """
    Priority-ordered rules for a single field.

    Example:
        chain = RuleChain("declared_weight", rules, parser=parse_number)
        match = chain.evaluate("Gross weight: 1,200 kg")
        match.value      # 1200.0
        match.rule_name  # "gross_weight"
    """
    field_name: str
    rules: tuple[PatternRule, ...]
    parser: Callable[[str], T | None] = _identity

    def evaluate(self, text: str) -> FieldMatch[T]:
        for rule in self.rules:
            raw = rule.search(text)
            if raw is None:
                continue

            value = self.parser(raw)
            if value is None:
                logger.debug(f"{self.field_name}: rule '{rule.name}' matched '{raw}' but could not be parsed")
                return FieldMatch(
                    value=None,
                    rule_name=rule.name,
                    raw_text=raw,
                    errors=[f"Could not parse '{raw}'"],
                )
            return FieldMatch(value=value, rule_name=rule.name, raw_text=raw)

        return FieldMatch(value=None)

    def trace(self, text: str) -> list[RuleTrace]:
        """Evaluate every rule, including those after the winner, for inspection."""
        steps: list[RuleTrace] = []
        for rule in self.rules:
            raw = rule.search(text)
            if raw is None:
                steps.append(RuleTrace(rule_name=rule.name, matched=False))
            else:
                steps.append(
                    RuleTrace(
                        rule_name=rule.name,
                        matched=True,
                        raw_text=raw,
                        parsed=self.parser(raw) is not None,
                    )
                )
        return steps
