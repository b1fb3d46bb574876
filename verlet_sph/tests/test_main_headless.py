"""Smoke tests for the headless runner."""

import logging

import pytest

from verlet_sph.main_headless import build_scene, main


@pytest.fixture(autouse=True)
def restore_logger():
    yield
    logger = logging.getLogger("verlet_sph")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


class TestHeadless:

    def test_scene_contents(self):
        world = build_scene(10.0, 0.01, 4)
        fluid = [p for p in world.particles if p.is_fluid]
        fixed = [p for p in world.particles if p.fixed]
        assert len(fluid) > 0
        assert len(fixed) > 0
        assert len(world.constraints) == 5

    @pytest.mark.parametrize("mode", ["none", "grid", "hash"])
    def test_runs_each_partitioning(self, capsys, mode):
        assert main(["--steps", "3", "--size", "10", "--partitioning", mode,
                     "--log-level", "WARNING"]) == 0
        out = capsys.readouterr().out
        assert "Simulation complete!" in out
        assert "ms/step" in out

    def test_snapshot(self, tmp_path):
        snapshot = tmp_path / "final.png"
        assert main(["--steps", "2", "--size", "10", "--snapshot", str(snapshot),
                     "--log-level", "WARNING"]) == 0
        assert snapshot.exists()
        assert snapshot.stat().st_size > 0

    def test_log_level_reaches_world(self):
        assert build_scene(10.0, 0.01, 4, log_level="DEBUG").logger.level == logging.DEBUG
        assert build_scene(10.0, 0.01, 4).logger.level == logging.NOTSET

    def test_debug_run_logs_world_records(self, capsys):
        assert main(["--steps", "1", "--size", "10", "--partitioning", "hash",
                     "--log-level", "DEBUG"]) == 0
        assert "Spatial index rebuilt: HashBuckets" in capsys.readouterr().out
