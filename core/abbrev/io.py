"""
Abbreviation File Import/Export

Line oriented text format, one abbreviation per line:

    label::==printed term
    !label::==printed term      (disabled abbreviation)

Blank lines and lines starting with ``#`` or ``//`` are comments and are
skipped by the loader. A line is split once, on the first separator.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Union

from .abbrev_map import AbbrevMap
from .codec import TermCodec
from .exceptions import (
    AbbrevError, AbbrevFileError, DuplicateLabel, DuplicateTerm,
    InvalidLabel, ParseError,
)

logger = logging.getLogger(__name__)

# Separator between abbreviation label and term inside stored files
SEPARATOR = "::=="

DISABLED_MARKER = "!"

COMMENT_PREFIXES = ("#", "//")


@dataclass
class LineError:
    """A load failure tied to one line of input."""
    line_no: int
    line: str
    kind: str  # parse | duplicate_label | duplicate_term | invalid_label
    message: str


@dataclass
class LoadReport:
    """Outcome of one deserialize() run."""
    added: int = 0
    skipped: int = 0
    errors: List[LineError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


ErrorSink = Callable[[LineError], None]


def is_comment_line(line: str) -> bool:
    """Blank, ``#`` or ``//`` lines carry no abbreviation."""
    stripped = line.strip()
    return not stripped or stripped.startswith(COMMENT_PREFIXES)


def format_line(label: str, printed: str, enabled: bool = True) -> str:
    prefix = "" if enabled else DISABLED_MARKER
    return f"{prefix}{label}{SEPARATOR}{printed}"


def serialize(abbrev_map: AbbrevMap, codec: TermCodec) -> str:
    """
    Render all abbreviations of ``abbrev_map``.

    Args:
        abbrev_map: Map to export
        codec: Printer for the map's proof context

    Returns:
        Lines joined by ``\\n`` (no trailing newline)
    """
    return "\n".join(
        format_line(entry.label, codec.print(entry.term), entry.enabled)
        for entry in abbrev_map.entries()
    )


def _error_kind(exc: AbbrevError) -> str:
    if isinstance(exc, DuplicateLabel):
        return "duplicate_label"
    if isinstance(exc, DuplicateTerm):
        return "duplicate_term"
    if isinstance(exc, InvalidLabel):
        return "invalid_label"
    return "parse"


def deserialize(
    text: str,
    codec: TermCodec,
    target: AbbrevMap,
    on_error: Optional[ErrorSink] = None,
) -> LoadReport:
    """
    Add the abbreviations in ``text`` to ``target``.

    One bad line never aborts the load: parse failures and rejected puts are
    collected in the report (and passed to ``on_error``), the remaining lines
    are still processed. Lines without a separator are skipped silently.

    Args:
        text: File content
        codec: Parser for the target's proof context
        target: Map receiving the entries
        on_error: Optional per-line diagnostic sink

    Returns:
        LoadReport
    """
    report = LoadReport()

    for line_no, line in enumerate(text.split("\n"), start=1):
        if is_comment_line(line):
            continue

        label, sep, printed = line.partition(SEPARATOR)
        if not sep:
            report.skipped += 1
            continue

        label = label.strip()
        enabled = True
        if label.startswith(DISABLED_MARKER):
            enabled = False
            label = label[len(DISABLED_MARKER):].strip()

        try:
            term = codec.parse(printed.strip())
            target.put(term, label, enabled)
        except (ParseError, DuplicateLabel, DuplicateTerm, InvalidLabel) as e:
            error = LineError(
                line_no=line_no,
                line=line.rstrip("\r"),
                kind=_error_kind(e),
                message=str(e),
            )
            report.errors.append(error)
            logger.warning(f"Could not add line {line_no} ({label!r}): {e}")
            if on_error is not None:
                on_error(error)
            continue

        report.added += 1

    logger.info(
        f"Loaded {report.added} abbreviations "
        f"({len(report.errors)} errors, {report.skipped} skipped)"
    )
    return report


# ==================== FILES ====================

def load_file(
    path: Union[str, Path],
    codec: TermCodec,
    target: AbbrevMap,
    encoding: str = "utf-8",
    on_error: Optional[ErrorSink] = None,
) -> LoadReport:
    """Read ``path`` and deserialize it into ``target``.

    The whole file is read before the map is touched, so an I/O failure
    leaves ``target`` unchanged.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"File I/O error reading {path}: {e}")
        raise AbbrevFileError(path, str(e)) from e
    return deserialize(text, codec, target, on_error=on_error)


def save_file(
    path: Union[str, Path],
    abbrev_map: AbbrevMap,
    codec: TermCodec,
    encoding: str = "utf-8",
) -> int:
    """Write all abbreviations of ``abbrev_map`` to ``path``.

    Returns:
        Number of abbreviations written
    """
    path = Path(path)
    content = serialize(abbrev_map, codec)
    try:
        path.write_text(content, encoding=encoding)
    except OSError as e:
        logger.error(f"File I/O error writing {path}: {e}")
        raise AbbrevFileError(path, str(e)) from e
    count = len(content.split("\n")) if content else 0
    logger.info(f"Saved {count} abbreviations to {path}")
    return count
