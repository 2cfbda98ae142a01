"""
Abbreviation Management Module
Named abbreviations for terms of a proof.

Features:
- Bidirectional label <-> term map with enable/disable flags
- Change notification with explicit subscription handles
- Line based text import/export (``label::==term``)
- Transfer of abbreviations between proofs (print, then reparse)

Usage:
    from core.abbrev import AbbrevMap, serialize, deserialize

    abbrevs = AbbrevMap()
    abbrevs.put(term, "inv")
    text = serialize(abbrevs, codec)

    other = AbbrevMap()
    report = deserialize(text, other_codec, other)

The proof session service lives in ``core.abbrev.service``.
"""

from .abbrev_map import AbbrevMap
from .codec import TermCodec
from .exceptions import (
    AbbrevError,
    AbbrevFileError,
    DuplicateLabel,
    DuplicateTerm,
    InvalidLabel,
    ParseError,
    UnknownLabel,
    UnknownProof,
    UnknownTerm,
)
from .io import SEPARATOR, LoadReport, LineError, deserialize, load_file, save_file, serialize
from .list_model import AbbrevListModel
from .models import Abbreviation
from .notifier import ChangeNotifier, Subscription
from .transfer import TransferReport, TransferError, transfer

__all__ = [
    "AbbrevMap",
    "Abbreviation",
    "AbbrevListModel",
    "ChangeNotifier",
    "Subscription",
    "TermCodec",
    "SEPARATOR",
    "serialize",
    "deserialize",
    "load_file",
    "save_file",
    "LoadReport",
    "LineError",
    "transfer",
    "TransferReport",
    "TransferError",
    "AbbrevError",
    "AbbrevFileError",
    "DuplicateLabel",
    "DuplicateTerm",
    "InvalidLabel",
    "ParseError",
    "UnknownLabel",
    "UnknownProof",
    "UnknownTerm",
]

__version__ = "1.0.0"
