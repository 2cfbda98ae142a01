"""
Abbreviation Map: bidirectional label <-> term store of one proof.

Both indices always describe the same set of entries:
- a label is bound to at most one term
- a term carries at most one label
- unbound terms are simply absent

Every effective mutation bumps ``revision`` and notifies subscribers
synchronously, after both indices are updated.

Usage::

    abbrevs = AbbrevMap()
    handle = abbrevs.subscribe(view.refresh)

    abbrevs.put(term, "inv")
    abbrevs.change_abbrev(term, "invariant")
    abbrevs.set_enabled(term, False)

    for term, label in abbrevs.export():
        ...
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Any, Dict, Hashable, List, Optional

from .exceptions import DuplicateLabel, DuplicateTerm, UnknownLabel, UnknownTerm
from .models import Abbreviation, ExportedPair, sort_by_label, validate_label
from .notifier import ChangeNotifier, Listener, Subscription

logger = logging.getLogger(__name__)


class AbbrevMap:
    """Observable bidirectional abbreviation store.

    Thread-safe: mutation and the notification that follows it run under one
    re-entrant lock, so listeners may read the map from inside the callback.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._by_label: Dict[str, Abbreviation] = {}
        self._by_term: Dict[Hashable, Abbreviation] = {}
        self._revision = 0
        self._notifier = ChangeNotifier()

    # --- Queries ---

    @property
    def revision(self) -> int:
        return self._revision

    def contains_term(self, term: Hashable) -> bool:
        with self._lock:
            return term in self._by_term

    def contains_label(self, label: str) -> bool:
        with self._lock:
            return label in self._by_label

    def get_term(self, label: str) -> Optional[Any]:
        """Term bound to ``label``, or None."""
        with self._lock:
            entry = self._by_label.get(label)
            return entry.term if entry else None

    def get_label(self, term: Hashable) -> Optional[str]:
        """Label of ``term``, or None."""
        with self._lock:
            entry = self._by_term.get(term)
            return entry.label if entry else None

    def is_enabled(self, term: Hashable) -> bool:
        """Enabled flag of ``term``. False for unbound terms."""
        with self._lock:
            entry = self._by_term.get(term)
            return entry.enabled if entry else False

    def export(self) -> List[ExportedPair]:
        """Snapshot of all (term, label) pairs in insertion order."""
        with self._lock:
            return [entry.as_pair() for entry in self._by_label.values()]

    def entries(self) -> List[Abbreviation]:
        """Snapshot copies of all entries in insertion order."""
        with self._lock:
            return [replace(entry) for entry in self._by_label.values()]

    def list_entries(self) -> List[Abbreviation]:
        """Snapshot copies sorted by label (display order)."""
        return sort_by_label(self.entries())

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_label)

    def __contains__(self, label: object) -> bool:
        with self._lock:
            return label in self._by_label

    def __repr__(self):
        return f"<AbbrevMap {len(self)} entries rev={self._revision}>"

    # --- Mutations ---

    def put(self, term: Hashable, label: str, enabled: bool = True) -> None:
        """Bind ``label`` to ``term``.

        Raises:
            InvalidLabel: label is not a word token
            DuplicateTerm: term already carries a label
            DuplicateLabel: label already names another term
        """
        label = validate_label(label)
        with self._lock:
            existing = self._by_term.get(term)
            if existing is not None:
                raise DuplicateTerm(term, existing.label)
            if label in self._by_label:
                raise DuplicateLabel(label, self._by_label[label].term)
            self._insert(Abbreviation(term=term, label=label, enabled=enabled))
            self._changed()

    def remove(self, term: Hashable) -> bool:
        """Delete the binding of ``term``. Returns False if there was none."""
        with self._lock:
            entry = self._by_term.get(term)
            if entry is None:
                return False
            self._discard(entry)
            self._changed()
            return True

    def remove_label(self, label: str) -> bool:
        """Delete the binding named ``label``. Returns False if there was none."""
        with self._lock:
            entry = self._by_label.get(label)
            if entry is None:
                return False
            self._discard(entry)
            self._changed()
            return True

    def change_abbrev(self, term: Hashable, new_label: str) -> None:
        """Rename the label bound to ``term``, keeping its enabled flag.

        Raises:
            UnknownTerm: term has no binding
            DuplicateLabel: new_label is used by a different term
        """
        new_label = validate_label(new_label)
        with self._lock:
            entry = self._by_term.get(term)
            if entry is None:
                raise UnknownTerm(term)
            if entry.label == new_label:
                return
            if new_label in self._by_label:
                raise DuplicateLabel(new_label, self._by_label[new_label].term)
            del self._by_label[entry.label]
            entry.label = new_label
            self._by_label[new_label] = entry
            self._changed()

    def change_term(self, label: str, new_term: Hashable, enabled: bool = True) -> None:
        """Rebind the entry named ``label`` to ``new_term``.

        Raises:
            UnknownLabel: label is not bound
            DuplicateTerm: new_term already carries a different label
        """
        with self._lock:
            entry = self._by_label.get(label)
            if entry is None:
                raise UnknownLabel(label)
            other = self._by_term.get(new_term)
            if other is not None and other is not entry:
                raise DuplicateTerm(new_term, other.label)
            if entry.term == new_term and entry.enabled == enabled:
                return
            del self._by_term[entry.term]
            entry.term = new_term
            entry.enabled = enabled
            self._by_term[new_term] = entry
            self._changed()

    def update(
        self,
        label: str,
        term: Optional[Hashable] = None,
        enabled: Optional[bool] = None,
        new_label: Optional[str] = None,
    ) -> Abbreviation:
        """Change term, enabled flag and label of one entry in a single step.

        ``None`` keeps the current value. All checks run before anything is
        applied, so a rejected update leaves the map as it was.

        Raises:
            UnknownLabel: label is not bound
            InvalidLabel: new_label is not a word token
            DuplicateTerm: term already carries a different label
            DuplicateLabel: new_label names a different entry
        """
        if new_label is not None:
            new_label = validate_label(new_label)
        with self._lock:
            entry = self._by_label.get(label)
            if entry is None:
                raise UnknownLabel(label)
            if term is not None:
                other = self._by_term.get(term)
                if other is not None and other is not entry:
                    raise DuplicateTerm(term, other.label)
            if new_label is not None:
                other = self._by_label.get(new_label)
                if other is not None and other is not entry:
                    raise DuplicateLabel(new_label, other.term)

            updated = Abbreviation(
                term=entry.term if term is None else term,
                label=entry.label if new_label is None else new_label,
                enabled=entry.enabled if enabled is None else enabled,
            )
            if updated == entry:
                return replace(entry)
            self._discard(entry)
            entry.term, entry.label, entry.enabled = updated.term, updated.label, updated.enabled
            self._insert(entry)
            self._changed()
            return replace(entry)

    def set_enabled(self, term: Hashable, enabled: bool) -> None:
        """Set the enabled flag of ``term``. No-op for unbound terms."""
        with self._lock:
            entry = self._by_term.get(term)
            if entry is None or entry.enabled == enabled:
                return
            entry.enabled = enabled
            self._changed()

    def toggle(self, term: Hashable) -> bool:
        """Flip the enabled flag of ``term`` and return the new value."""
        with self._lock:
            entry = self._by_term.get(term)
            if entry is None:
                raise UnknownTerm(term)
            entry.enabled = not entry.enabled
            self._changed()
            return entry.enabled

    def force_put(self, label: str, term: Hashable, enabled: bool = True) -> None:
        """Insert or overwrite unconditionally.

        Any entry bound to ``term`` or named ``label`` is dropped first.
        Used by cross-proof transfer; best effort, no correctness guarantee
        beyond the map invariants.
        """
        label = validate_label(label)
        with self._lock:
            for stale in (self._by_term.get(term), self._by_label.get(label)):
                if stale is not None and self._by_label.get(stale.label) is stale:
                    self._discard(stale)
            self._insert(Abbreviation(term=term, label=label, enabled=enabled))
            self._changed()

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            if not self._by_label:
                return
            self._by_label.clear()
            self._by_term.clear()
            self._changed()

    # --- Subscriptions ---

    def subscribe(self, listener: Listener) -> Subscription:
        """Register a zero-argument change listener."""
        with self._lock:
            return self._notifier.subscribe(listener)

    def unsubscribe(self, handle: Subscription) -> bool:
        with self._lock:
            return self._notifier.unsubscribe(handle)

    @property
    def subscriber_count(self) -> int:
        return len(self._notifier)

    def close(self) -> None:
        """Release all subscriptions; called when the owning proof is discarded."""
        with self._lock:
            dropped = len(self._notifier)
            self._notifier.clear()
        if dropped:
            logger.debug("Closed abbreviation map, dropped %d subscriptions", dropped)

    # --- Internals ---

    def _insert(self, entry: Abbreviation) -> None:
        self._by_label[entry.label] = entry
        self._by_term[entry.term] = entry

    def _discard(self, entry: Abbreviation) -> None:
        del self._by_label[entry.label]
        del self._by_term[entry.term]

    def _changed(self) -> None:
        self._revision += 1
        self._notifier.notify()
