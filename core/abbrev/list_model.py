"""
List model that follows the currently selected abbreviation map.

Keeps a label-sorted snapshot for display and refreshes it whenever the
observed map changes. Switching targets releases the old subscription
before the new one is taken.
"""
import logging
from dataclasses import replace
from typing import Callable, List, Optional

from .abbrev_map import AbbrevMap
from .models import Abbreviation
from .notifier import Subscription

logger = logging.getLogger(__name__)


class AbbrevListModel:
    """Observer of one AbbrevMap at a time."""

    def __init__(self, on_refresh: Optional[Callable[[List[Abbreviation]], None]] = None):
        self._map: Optional[AbbrevMap] = None
        self._handle: Optional[Subscription] = None
        self._entries: List[Abbreviation] = []
        self._revision: Optional[int] = None
        self._on_refresh = on_refresh

    @property
    def observed(self) -> Optional[AbbrevMap]:
        return self._map

    @property
    def entries(self) -> List[Abbreviation]:
        return [replace(entry) for entry in self._entries]

    @property
    def revision(self) -> Optional[int]:
        """Revision of the observed map at the last refresh."""
        return self._revision

    @property
    def is_stale(self) -> bool:
        return self._map is not None and self._map.revision != self._revision

    def observe(self, abbrev_map: Optional[AbbrevMap]) -> None:
        """Switch to ``abbrev_map`` (None to observe nothing)."""
        if abbrev_map is self._map:
            self.refresh()
            return
        self._release()
        logger.debug("List model now observing %r", abbrev_map)
        if abbrev_map is not None:
            self._handle = abbrev_map.subscribe(self.refresh)
            self._map = abbrev_map
        self.refresh()

    def refresh(self) -> None:
        if self._map is None:
            self._entries = []
            self._revision = None
        else:
            self._entries = self._map.list_entries()
            self._revision = self._map.revision
        if self._on_refresh is not None:
            self._on_refresh(self.entries)

    def close(self) -> None:
        self._release()
        self._entries = []
        self._revision = None

    def _release(self) -> None:
        if self._map is not None and self._handle is not None:
            self._map.unsubscribe(self._handle)
        self._map = None
        self._handle = None

    def __len__(self) -> int:
        return len(self._entries)
