"""Instruction pacing against the 60Hz frame/timer cadence."""

from chipjax.constants import INSTRUCTIONS_PER_SECOND, TIMER_HZ


class Pacer:
    """Split an instruction rate into whole steps per timer frame.

    The fractional remainder is carried from frame to frame, so over any run of
    frames the step total stays within one step of ``ips * frames / timer_hz``.
    At 500 steps/s and 60Hz each frame runs 8 or 9 steps (8, 8, 9 repeating).
    """

    def __init__(self, instructions_per_second: int = INSTRUCTIONS_PER_SECOND, timer_hz: int = TIMER_HZ):
        if instructions_per_second <= 0:
            raise ValueError(f"instructions_per_second must be positive, got {instructions_per_second}")
        if timer_hz <= 0:
            raise ValueError(f"timer_hz must be positive, got {timer_hz}")
        self.instructions_per_second = instructions_per_second
        self.timer_hz = timer_hz
        self._remainder = 0

    def next_frame(self) -> int:
        """Number of steps to run before the next timer tick."""
        total = self._remainder + self.instructions_per_second
        steps, self._remainder = divmod(total, self.timer_hz)
        return steps

    def reset(self):
        self._remainder = 0
