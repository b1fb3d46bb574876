"""Tests for the fixed-step driver."""

import pytest

from verlet_sph import FixedStepDriver, InvalidParameter


@pytest.fixture
def driver(world):
    return FixedStepDriver(world, max_steps_per_advance=5)


class TestAccumulation:

    def test_runs_whole_steps_and_keeps_remainder(self, driver):
        assert driver.advance(0.025) == 2
        assert driver.world.step_count == 2
        assert driver.accumulator == pytest.approx(0.005)

    def test_remainder_carries_over(self, driver):
        assert driver.advance(0.005) == 0
        assert driver.advance(0.006) == 1
        assert driver.accumulator == pytest.approx(0.001)

    def test_backlog_beyond_cap_is_dropped(self, driver):
        assert driver.advance(1.0) == 5
        assert driver.accumulator == 0.0
        assert driver.dropped_time == pytest.approx(0.95)
        assert driver.world.time == pytest.approx(0.05)

    def test_negative_elapsed_rejected(self, driver):
        with pytest.raises(InvalidParameter):
            driver.advance(-0.1)

    def test_cap_must_be_positive(self, world):
        with pytest.raises(InvalidParameter):
            FixedStepDriver(world, max_steps_per_advance=0)


class TestPause:

    def test_paused_driver_does_not_advance(self, driver):
        driver.pause()
        assert driver.advance(0.5) == 0
        assert driver.world.step_count == 0

    def test_single_step_while_paused(self, driver):
        driver.pause()
        driver.step()
        driver.step(3)
        assert driver.world.step_count == 4
        assert driver.paused

    def test_resume_discards_paused_time(self, driver):
        driver.advance(0.005)
        driver.pause()
        driver.resume()
        assert driver.accumulator == 0.0
        assert driver.advance(0.009) == 0

    def test_toggle(self, world):
        driver = FixedStepDriver(world, paused=True)
        driver.toggle_pause()
        assert not driver.paused
        driver.toggle_pause()
        assert driver.paused
