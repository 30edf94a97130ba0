"""
Menu Data Cache - Parsed Menus per Branch.

Parsing menu text is cheap but not free, and the same text is parsed on every
inbound message. This cache keeps the parsed MenuItem list per branch and
re-parses only when the SHA-256 of the branch's menu text changes.

Features:
- Content-hash keyed: an edited menu is picked up on the next lookup
- Explicit invalidation when a branch's stored menu changes
- LRU bound on the number of branches kept in memory
- Thread-safe; instances are created and injected by the caller

Usage:
    from branch_bot.menu_data_cache import MenuCache

    cache = MenuCache()
    items = cache.get_items(branch_id, menu_text)
    matcher = cache.get_matcher(branch_id, menu_text)
"""

import hashlib
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from .config import MENU_CACHE_MAX_BRANCHES
from .models import BranchMenu
from .tasks.errors import MenuUnavailableError
from .tasks.menu_lookup import ProductMatcher
from .tasks.menu_parser import MenuParser
from .tasks.models import MenuItem, ParseReport

logger = logging.getLogger(__name__)


def menu_text_hash(menu_text: str) -> str:
    return hashlib.sha256((menu_text or "").encode("utf-8")).hexdigest()


@dataclass
class _CacheEntry:
    text_hash: str
    report: ParseReport
    matcher: ProductMatcher
    loaded_at: float


class MenuCache:
    """
    Cache of parsed menus keyed by branch id.

    The parser is injected so tests and branches with a known menu shape
    can supply their own strategies.
    """

    def __init__(
        self,
        parser: MenuParser | None = None,
        max_branches: int = MENU_CACHE_MAX_BRANCHES,
    ):
        self.parser = parser or MenuParser()
        self.max_branches = max_branches
        self._entries: "OrderedDict[str, _CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def _entry(self, branch_id: str, menu_text: str) -> _CacheEntry:
        text_hash = menu_text_hash(menu_text)

        with self._lock:
            entry = self._entries.get(branch_id)
            if entry is not None and entry.text_hash == text_hash:
                self._entries.move_to_end(branch_id)
                self._hits += 1
                logger.debug("Menu cache hit for branch %s", branch_id)
                return entry
            self._misses += 1

        # Parse outside the lock; a concurrent miss for the same branch just
        # parses twice and the last writer wins
        report = self.parser.parse_with_report(menu_text)
        entry = _CacheEntry(
            text_hash=text_hash,
            report=report,
            matcher=ProductMatcher(report.items),
            loaded_at=time.time(),
        )

        with self._lock:
            self._entries[branch_id] = entry
            self._entries.move_to_end(branch_id)
            while len(self._entries) > self.max_branches:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted parsed menu for branch %s", evicted)

        logger.debug("Menu cache miss for branch %s: parsed %d items", branch_id, len(report.items))
        return entry

    def get_report(self, branch_id: str, menu_text: str) -> ParseReport:
        return self._entry(branch_id, menu_text).report

    def get_items(self, branch_id: str, menu_text: str) -> list[MenuItem]:
        """Parsed items for the branch's current menu text."""
        return self._entry(branch_id, menu_text).report.items

    def get_matcher(self, branch_id: str, menu_text: str) -> ProductMatcher:
        """ProductMatcher built over the branch's current menu."""
        return self._entry(branch_id, menu_text).matcher

    def get_items_from_db(self, db: Session, branch_id: str) -> list[MenuItem]:
        """
        Parsed items for the menu stored for a branch.

        Raises:
            MenuUnavailableError: the branch has no stored menu text
        """
        menu = db.query(BranchMenu).filter(BranchMenu.branch_id == branch_id).first()
        if menu is None or not (menu.menu_text or "").strip():
            logger.warning("No stored menu for branch %s", branch_id)
            raise MenuUnavailableError(branch_id)
        return self.get_items(branch_id, menu.menu_text)

    def invalidate(self, branch_id: str | None = None) -> int:
        """
        Drop the cached menu for one branch, or for every branch if None.

        Returns:
            int: Number of entries removed
        """
        with self._lock:
            if branch_id is None:
                count = len(self._entries)
                self._entries.clear()
            else:
                count = 1 if self._entries.pop(branch_id, None) is not None else 0
        logger.info("Invalidated %d cached menu(s)%s", count, f" for branch {branch_id}" if branch_id else "")
        return count

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "branches": len(self._entries),
                "max_branches": self.max_branches,
                "hits": self._hits,
                "misses": self._misses,
            }
