"""Practitioner discovery helpers."""

from .filters import (
    ALL,
    FilterChoices,
    FilterCriteria,
    apply_filters,
    filter_choices,
    matches,
    summarize,
)

__all__ = [
    "ALL",
    "FilterChoices",
    "FilterCriteria",
    "apply_filters",
    "filter_choices",
    "matches",
    "summarize",
]
