"""
tracker_session.py — In-memory view of one user's tracker, kept honest.
Actions are applied optimistically to the local state, then confirmed
against the store before dispatch() returns, so anything that reads the
aggregate next sees the confirmed value. A failed write throws the local
delta away and reloads the authoritative state; nothing is merged.
"""

import logging
from datetime import datetime, timezone
from typing import Callable

from schemas import TrackerState
from services.errors import StoreError, TransientStoreError
from services.log_entries import find_entry, with_entry
from services.reducer import reduce
from services.result import Result

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TrackerSession:
    def __init__(self, repository, clock: Callable[[], datetime] = _utcnow):
        self.repository = repository
        self.clock = clock
        self.state: TrackerState = repository.load_state()

    def dispatch(self, action) -> Result:
        self._ensure_log_loaded(getattr(action, "log_id", None))

        result = reduce(self.state, action, self.clock())
        if not result.is_ok:
            return result

        self.state = result.state
        try:
            self.repository.apply(result.effects)
        except StoreError as e:
            logger.warning(f"{type(action).__name__} for user {self.state.user_id} was not saved ({e}); reloading")
            self.reload()
            return Result.err(
                TransientStoreError("Your change could not be saved and was undone. Please try again."),
                state=self.state,
            )
        return result

    def reload(self) -> TrackerState:
        self.state = self.repository.load_state()
        return self.state

    def _ensure_log_loaded(self, log_id: str | None) -> None:
        """Entries older than the loaded window are fetched when an action names them."""
        if not log_id or find_entry(self.state, log_id) is not None:
            return
        entry = self.repository.get_log(log_id)
        if entry is not None:
            self.state = with_entry(self.state, entry)
