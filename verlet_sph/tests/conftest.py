"""Pytest configuration and shared fixtures for verlet_sph tests."""
import os

import pytest

from verlet_sph import World, WorldConfig
from verlet_sph.core.particles import Particle


def pytest_configure(config):
    """Configure pytest environment for headless runs."""
    os.environ['MPLBACKEND'] = 'Agg'


@pytest.fixture
def make_particle():
    """Factory for bare particles outside any world."""
    def _make(x, y, vx=0.0, vy=0.0, mass=1.0, radius=0.1, fixed=False):
        return Particle(x, y, vx, vy, 0.0, 0.0, 0.0, 0.0, mass, radius, fixed)
    return _make


@pytest.fixture
def world():
    """10x10 world with default settings."""
    return World(10.0, 10.0, 0.01, 4)


@pytest.fixture
def weightless_world():
    """20x20 world without gravity."""
    return World(20.0, 20.0, 0.01, 4, config=WorldConfig(gravity=(0.0, 0.0)))
