"""Duplicate review service: highlight, scroll-sync and candidate ranking for plagiarism comparison views."""

__version__ = "1.0.0"
