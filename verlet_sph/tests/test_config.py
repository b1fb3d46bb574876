"""Tests for WorldConfig and logging setup."""

import dataclasses
import json
import logging

import pytest

from verlet_sph import InvalidParameter, SpatialPartitioning, World, WorldConfig, setup_logging


class TestWorldConfig:

    def test_defaults(self):
        config = WorldConfig()
        assert config.gravity == (0.0, -9.81)
        assert config.rest_density == 1000.0
        assert config.pressure_stiffness == 16.0
        assert config.viscosity == 35.0
        assert config.smoothing_length == 1.0
        assert config.partitioning is SpatialPartitioning.GRID
        assert config.restitution == 0.3
        assert config.contact_radius == 0.1

    def test_partitioning_by_name(self):
        assert WorldConfig(partitioning="hash").partitioning is SpatialPartitioning.HASH

    def test_gravity_is_normalised_to_floats(self):
        config = WorldConfig(gravity=[0, -10])
        assert config.gravity == (0.0, -10.0)
        assert isinstance(config.gravity, tuple)

    def test_is_immutable(self):
        config = WorldConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.viscosity = 1.0

    @pytest.mark.parametrize("options", [
        {'gravity': (0.0, 1.0, 2.0)},
        {'smoothing_length': -1.0},
        {'rest_density': 0.0},
        {'pressure_stiffness': -1.0},
        {'viscosity': -0.1},
        {'restitution': 1.1},
        {'contact_radius': 0.0},
        {'contact_stiffness': 0.0},
        {'constraint_stiffness': 1.5},
        {'partitioning': 'quadtree'},
    ])
    def test_out_of_range_values(self, options):
        with pytest.raises(InvalidParameter):
            WorldConfig(**options)

    def test_invalid_parameter_is_value_error(self):
        with pytest.raises(ValueError):
            WorldConfig(viscosity=-1.0)

    def test_from_mapping_rejects_unknown_keys(self):
        with pytest.raises(InvalidParameter):
            WorldConfig.from_mapping({'viscosity': 10.0, 'colour': 'blue'})

    def test_from_json(self, tmp_path):
        path = tmp_path / "world.json"
        path.write_text(json.dumps({'gravity': [0.0, -1.62], 'partitioning': 'none',
                                    'viscosity': 20.0}))
        config = WorldConfig.from_json(str(path))
        assert config.gravity == (0.0, -1.62)
        assert config.partitioning is SpatialPartitioning.NONE
        assert config.viscosity == 20.0
        assert config.rest_density == 1000.0


class TestLogging:

    @pytest.fixture(autouse=True)
    def restore_logger(self):
        yield
        logger = logging.getLogger("verlet_sph")
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)

    def test_setup_is_idempotent(self):
        setup_logging(logging.DEBUG)
        logger = setup_logging("WARNING")
        assert logger.name == "verlet_sph"
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "run.log"
        logger = setup_logging(logging.INFO, str(log_file))
        logging.getLogger("verlet_sph.world").info("hello from a child logger")
        for handler in logger.handlers:
            handler.flush()
        assert "hello from a child logger" in log_file.read_text(encoding="utf-8")

    def test_world_logger_follows_package_level(self, caplog):
        setup_logging("DEBUG")
        world = World(10.0, 10.0, 0.01, 4)
        assert world.logger.level == logging.NOTSET
        assert world.logger.getEffectiveLevel() == logging.DEBUG

        with caplog.at_level(logging.DEBUG):
            world.configure(partitioning="hash")
        messages = [r.getMessage() for r in caplog.records if r.name == world.logger.name]
        assert any(m.startswith("Spatial index rebuilt: HashBuckets") for m in messages)

    def test_package_level_silences_world_debug(self, caplog):
        setup_logging("WARNING")
        world = World(10.0, 10.0, 0.01, 4)
        with caplog.at_level(logging.DEBUG):
            world.configure(partitioning="hash")
        assert not [r for r in caplog.records if r.name == world.logger.name]

    def test_explicit_world_level_overrides_package(self):
        setup_logging("DEBUG")
        world = World(10.0, 10.0, 0.01, 4, log_level="warning")
        assert world.logger.getEffectiveLevel() == logging.WARNING
