import logging
from typing import Optional
from pydantic import BaseModel

from checkers_arena.models.enums import TimeControl, Turn

logger = logging.getLogger(__name__)


class Clock(BaseModel):
    """
    Chess clock with Fischer increment.

    Elapsed time is always derived as `now - last_move_at`; nothing is
    accumulated between calls. At most one side's clock runs at a time and
    `active_player` is None until the game starts.
    """
    initial_time_ms: int
    increment_ms: int = 0
    red_time_ms: int
    black_time_ms: int
    last_move_at: int = 0
    active_player: Optional[Turn] = None

    @classmethod
    def for_time_control(cls, time_control: TimeControl) -> "Clock":
        initial = time_control.initial_time_ms
        return cls(
            initial_time_ms=initial,
            increment_ms=time_control.increment_ms,
            red_time_ms=initial,
            black_time_ms=initial,
        )

    def start(self, now_ms: int) -> None:
        self.last_move_at = now_ms
        self.active_player = Turn.RED

    def _stored(self, side: Turn) -> int:
        return self.red_time_ms if side is Turn.RED else self.black_time_ms

    def _store(self, side: Turn, value: int) -> None:
        if side is Turn.RED:
            self.red_time_ms = value
        else:
            self.black_time_ms = value

    def elapsed(self, now_ms: int) -> int:
        return max(0, now_ms - self.last_move_at)

    def on_move_completed(self, now_ms: int) -> bool:
        """
        Charges the side to move for the time it used.
        Returns False on flag fall (that side's time is clamped to zero and the
        clock stops flipping); the caller ends the game.
        """
        active = self.active_player
        if active is None:
            return True

        elapsed = self.elapsed(now_ms)
        remaining = self._stored(active)
        if elapsed >= remaining:
            self._store(active, 0)
            logger.debug("Flag fell for %s after %sms", active, elapsed)
            return False

        self._store(active, remaining - elapsed + self.increment_ms)
        self.active_player = active.opposite()
        self.last_move_at = now_ms
        return True

    def timed_out(self, now_ms: int) -> Optional[Turn]:
        """Pure read: the running side if its time is used up, else None."""
        active = self.active_player
        if active is None:
            return None
        if self.elapsed(now_ms) >= self._stored(active):
            return active
        return None

    def flag_fall(self, now_ms: int) -> Optional[Turn]:
        """Zeroes the running side's time if it has run out and returns that side."""
        side = self.timed_out(now_ms)
        if side is not None:
            self._store(side, 0)
        return side

    def remaining(self, side: Turn, now_ms: int) -> int:
        stored = self._stored(side)
        if self.active_player is side:
            return max(0, stored - self.elapsed(now_ms))
        return stored

    def time_control(self) -> Optional[TimeControl]:
        """Maps (initial, increment) back to a known time control."""
        for tc in TimeControl:
            if tc.initial_time_ms == self.initial_time_ms and tc.increment_ms == self.increment_ms:
                return tc
        return None
