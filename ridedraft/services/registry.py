"""In-memory registry of open ride forms, one controller per draft id.

Forms idle for longer than ``idle_ttl`` seconds are dropped, and once
``max_drafts`` forms are open the least recently used one is evicted to
make room for a new one.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections import OrderedDict
from typing import Callable, Optional

from .ride_form import RideFormController

logger = logging.getLogger(__name__)


class DraftRegistry:
    def __init__(
        self,
        factory: Callable[[], RideFormController],
        max_drafts: int = 10_000,
        idle_ttl: float = 1800.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._factory = factory
        self._max_drafts = max_drafts
        self._idle_ttl = idle_ttl
        self._clock = clock
        # Least recently used first.
        self._forms: OrderedDict[str, tuple[RideFormController, float]] = OrderedDict()

    def open(self) -> tuple[str, RideFormController]:
        self._prune()
        while len(self._forms) >= self._max_drafts:
            evicted, _ = self._forms.popitem(last=False)
            logger.info("Evicted ride form %s (registry full)", evicted)

        draft_id = uuid.uuid4().hex
        form = self._factory()
        self._forms[draft_id] = (form, self._clock())
        logger.info("Opened ride form %s", draft_id)
        return draft_id, form

    def get(self, draft_id: str) -> Optional[RideFormController]:
        self._prune()
        entry = self._forms.get(draft_id)
        if entry is None:
            return None
        form, _ = entry
        self._forms[draft_id] = (form, self._clock())
        self._forms.move_to_end(draft_id)
        return form

    def discard(self, draft_id: str) -> bool:
        """Drop a form (component teardown). Returns False if it was unknown."""
        removed = self._forms.pop(draft_id, None) is not None
        if removed:
            logger.info("Discarded ride form %s", draft_id)
        return removed

    def _prune(self) -> None:
        cutoff = self._clock() - self._idle_ttl
        while self._forms:
            draft_id, (_, last_seen) = next(iter(self._forms.items()))
            if last_seen > cutoff:
                break
            del self._forms[draft_id]
            logger.info("Expired idle ride form %s", draft_id)

    def __len__(self) -> int:
        return len(self._forms)
