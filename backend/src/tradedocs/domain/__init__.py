"""
Domain package - Core business logic with no external dependencies.

This package contains pure Python domain models and rules for case
aggregation, cross-document consistency and orphan association.
"""
