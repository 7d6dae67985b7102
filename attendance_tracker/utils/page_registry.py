"""
In-process registry of per-page controllers.
"""
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable

from attendance_tracker.services.attendance_controller import AttendanceController
from attendance_tracker.services.search_service import SearchController

logger = logging.getLogger(__name__)


@dataclass
class PageControllers:
    attendance: AttendanceController
    search: SearchController
    last_seen: float = field(default_factory=time.time)


class PageRegistry:
    """One PageControllers per open page; least recently seen pages are evicted."""

    def __init__(self, factory: Callable[[], PageControllers], max_pages: int = 500):
        self.factory = factory
        self.max_pages = max_pages
        self._pages: "OrderedDict[str, PageControllers]" = OrderedDict()
        self._lock = Lock()

    def get(self, page_id: str) -> PageControllers:
        with self._lock:
            page = self._pages.get(page_id)
            if page is None:
                page = self.factory()
                self._pages[page_id] = page
                logger.debug(f"Created controllers for page {page_id}")
                while len(self._pages) > self.max_pages:
                    evicted, _ = self._pages.popitem(last=False)
                    logger.info(f"Evicted idle page {evicted}")
            else:
                self._pages.move_to_end(page_id)
            page.last_seen = time.time()
            return page

    def discard(self, page_id: str) -> None:
        with self._lock:
            self._pages.pop(page_id, None)

    def __len__(self) -> int:
        return len(self._pages)
