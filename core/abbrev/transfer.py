"""
Cross-proof abbreviation transfer.

Terms of two proofs live in different namespaces and cannot be shared
directly. Each term is printed under the source context and parsed again
under the destination context; entries whose text does not parse there are
skipped and reported.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .abbrev_map import AbbrevMap
from .codec import TermCodec
from .exceptions import InvalidLabel, ParseError

logger = logging.getLogger(__name__)


@dataclass
class TransferError:
    """One source entry that could not be moved."""
    label: str
    printed: str
    message: str


@dataclass
class TransferReport:
    transferred: int = 0
    errors: List[TransferError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def transfer(
    source: AbbrevMap,
    source_codec: TermCodec,
    destination: AbbrevMap,
    destination_codec: TermCodec,
    on_error: Optional[Callable[[TransferError], None]] = None,
) -> TransferReport:
    """
    Copy every abbreviation of ``source`` into ``destination``.

    Existing destination entries with the same label or the same reparsed
    term are overwritten (``force_put``). The enabled flag is carried over.
    There is no rollback: entries copied before a failure stay.

    Returns:
        TransferReport
    """
    report = TransferReport()

    for entry in source.entries():
        printed = source_codec.print(entry.term)
        try:
            term = destination_codec.parse(printed)
            destination.force_put(entry.label, term, entry.enabled)
        except (ParseError, InvalidLabel) as e:
            error = TransferError(label=entry.label, printed=printed, message=str(e))
            report.errors.append(error)
            logger.warning(f"Could not transfer abbreviation {entry.label!r}: {e}")
            if on_error is not None:
                on_error(error)
            continue
        report.transferred += 1

    logger.info(
        f"Transferred {report.transferred} abbreviations ({len(report.errors)} failed)"
    )
    return report
