"""
Term codec interface.

The abbreviation manager never looks inside terms. It only needs the host's
pretty printer and parser, bound to one proof context (symbol namespace plus
the proof's own abbreviations for ``@label`` references).
"""
from abc import ABC, abstractmethod
from typing import Any


class TermCodec(ABC):
    """Print/parse pair bound to one proof context."""

    @abstractmethod
    def parse(self, text: str) -> Any:
        """Parse ``text`` into a term. Raises ParseError on failure."""

    @abstractmethod
    def print(self, term: Any) -> str:
        """Print ``term`` so that ``parse`` reads it back as the same term."""
