"""
Abbreviation data types.
"""
import re
from dataclasses import dataclass
from typing import Any, Hashable, List, Tuple

from .exceptions import InvalidLabel

# Labels double as ``@label`` references in term text
LABEL_PATTERN = re.compile(r"\w+")

ExportedPair = Tuple[Hashable, str]


@dataclass
class Abbreviation:
    """A label bound to a term."""

    term: Any
    label: str
    enabled: bool = True

    def as_pair(self) -> ExportedPair:
        return (self.term, self.label)


def validate_label(label: str) -> str:
    """Return the trimmed label or raise InvalidLabel."""
    if not isinstance(label, str):
        raise InvalidLabel(repr(label))
    trimmed = label.strip()
    if not LABEL_PATTERN.fullmatch(trimmed):
        raise InvalidLabel(label)
    return trimmed


def sort_by_label(entries: List[Abbreviation]) -> List[Abbreviation]:
    """Display order used by list views."""
    return sorted(entries, key=lambda e: e.label)
