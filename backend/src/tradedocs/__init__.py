"""
tradedocs - Trade document classification and cross-validation engine.

Turns extracted text from import documents into classified records,
groups them into case files and produces advisory compliance verdicts.
"""

__version__ = "0.1.0"
