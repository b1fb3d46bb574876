"""
Fixed-step driver decoupling wall-clock time from the simulation step.

Elapsed real time is accumulated and the world is advanced in whole
timesteps, so the physics always runs at its fixed dt regardless of the
frame rate of whatever is calling ``advance``.
"""

import logging

from .errors import InvalidParameter
from .world import World

logger = logging.getLogger(__name__)


class FixedStepDriver:
    """Accumulator loop around ``World.update``.

    Args:
        world: World to advance
        max_steps_per_advance: Cap on updates per ``advance`` call; leftover
            time beyond the cap is dropped so a slow frame cannot snowball
        paused: Start in the paused state
    """

    def __init__(self, world: World, max_steps_per_advance: int = 10, paused: bool = False):
        if max_steps_per_advance < 1:
            raise InvalidParameter(
                f"max_steps_per_advance must be >= 1, got {max_steps_per_advance}")
        self.world = world
        self.max_steps_per_advance = int(max_steps_per_advance)
        self.paused = paused
        self.accumulator = 0.0
        self.dropped_time = 0.0

    def advance(self, elapsed: float) -> int:
        """Add ``elapsed`` seconds and run every whole step now due.

        Returns:
            Number of world updates performed
        """
        if elapsed < 0.0:
            raise InvalidParameter(f"Elapsed time must be >= 0, got {elapsed}")
        if self.paused:
            return 0

        self.accumulator += elapsed
        period = self.world.timestep
        steps = 0
        while self.accumulator >= period and steps < self.max_steps_per_advance:
            self.accumulator -= period
            self.world.update()
            steps += 1

        if self.accumulator >= period:
            # Behind by more than the cap allows; drop the backlog
            self.dropped_time += self.accumulator
            logger.warning("Dropping %.4g s of simulation backlog", self.accumulator)
            self.accumulator = 0.0
        return steps

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        """Resume without replaying the time spent paused."""
        self.paused = False
        self.accumulator = 0.0

    def toggle_pause(self) -> None:
        if self.paused:
            self.resume()
        else:
            self.pause()

    def step(self, count: int = 1) -> None:
        """Advance the world by ``count`` steps, paused or not."""
        for _ in range(count):
            self.world.update()
