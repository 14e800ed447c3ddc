"""
Classification subpackage - Field extraction, type and source classification.
"""

from .classifier import Classification, KindProfile, TypeClassifier
from .extractor import FieldExtractor
from .source import SourceClassifier

__all__ = ["Classification", "FieldExtractor", "KindProfile", "SourceClassifier", "TypeClassifier"]
