"""
Tests for distance, contact and point constraints.

Covers:
- Per-sweep stiffness rescaling
- Mass-weighted and fixed-end corrections
- One-sided contacts and their single-step lifetime
- Breaking by strain
"""

import pytest

from verlet_sph.core.constraints import (ConstraintKind, ContactConstraint, DistanceConstraint,
                                         PointConstraint, adjusted_stiffness)
from verlet_sph.errors import InvalidParameter


class TestAdjustedStiffness:

    @pytest.mark.parametrize("iterations", [1, 2, 4, 10])
    def test_full_stiffness_is_preserved(self, iterations):
        assert adjusted_stiffness(1.0, iterations) == 1.0

    def test_single_iteration_is_identity(self):
        assert adjusted_stiffness(0.3, 1) == pytest.approx(0.3)

    @pytest.mark.parametrize("stiffness", [0.1, 0.5, 0.9])
    @pytest.mark.parametrize("iterations", [2, 5, 20])
    def test_sweeps_compose_to_overall_stiffness(self, stiffness, iterations):
        remaining = (1.0 - adjusted_stiffness(stiffness, iterations)) ** iterations
        assert remaining == pytest.approx(1.0 - stiffness)


class TestDistanceConstraint:

    def test_equal_masses_share_the_correction(self, make_particle):
        p1 = make_particle(0.0, 0.0)
        p2 = make_particle(2.0, 0.0)
        DistanceConstraint(p1, p2, 1.0, 1.0).enforce(1)
        assert p1.pos.x == pytest.approx(0.5)
        assert p2.pos.x == pytest.approx(1.5)

    def test_heavier_particle_moves_less(self, make_particle):
        p1 = make_particle(0.0, 0.0, mass=1.0)
        p2 = make_particle(2.0, 0.0, mass=3.0)
        DistanceConstraint(p1, p2, 1.0, 1.0).enforce(1)
        assert p1.pos.x == pytest.approx(0.75)
        assert p2.pos.x == pytest.approx(1.75)

    def test_fixed_end_takes_no_correction(self, make_particle):
        anchor = make_particle(0.0, 0.0, fixed=True)
        free = make_particle(0.0, -3.0)
        DistanceConstraint(anchor, free, 1.0, 1.0).enforce(1)
        assert (anchor.pos.x, anchor.pos.y) == (0.0, 0.0)
        assert free.pos.y == pytest.approx(-1.0)

        free2 = make_particle(0.0, -3.0)
        DistanceConstraint(free2, anchor, 1.0, 1.0).enforce(1)
        assert free2.pos.y == pytest.approx(-1.0)

    def test_both_fixed_is_a_no_op(self, make_particle):
        p1 = make_particle(0.0, 0.0, fixed=True)
        p2 = make_particle(5.0, 0.0, fixed=True)
        DistanceConstraint(p1, p2, 1.0, 1.0).enforce(4)
        assert p1.pos.x == 0.0
        assert p2.pos.x == 5.0

    def test_partial_stiffness(self, make_particle):
        p1 = make_particle(0.0, 0.0, fixed=True)
        p2 = make_particle(2.0, 0.0)
        constraint = DistanceConstraint(p1, p2, 1.0, 0.5)
        for _ in range(4):
            constraint.enforce(4)
        # Four sweeps at the rescaled stiffness remove half of the error
        assert p2.pos.x == pytest.approx(1.5)

    def test_coincident_particles_separate_along_x(self, make_particle):
        p1 = make_particle(1.0, 1.0)
        p2 = make_particle(1.0, 1.0)
        DistanceConstraint(p1, p2, 1.0, 1.0).enforce(1)
        assert p1.pos.x == pytest.approx(0.5)
        assert p2.pos.x == pytest.approx(1.5)
        assert p1.pos.y == p2.pos.y == 1.0

    def test_invalid_construction(self, make_particle):
        p1 = make_particle(0.0, 0.0)
        p2 = make_particle(1.0, 0.0)
        with pytest.raises(InvalidParameter):
            DistanceConstraint(p1, p1, 1.0, 0.9)
        with pytest.raises(InvalidParameter):
            DistanceConstraint(p1, p2, 0.0, 0.9)
        with pytest.raises(InvalidParameter):
            DistanceConstraint(p1, p2, 1.0, 0.0)
        with pytest.raises(InvalidParameter):
            DistanceConstraint(p1, p2, 1.0, 1.5)

    def test_breaks_only_when_breakable(self, make_particle):
        constraint = DistanceConstraint(make_particle(0.0, 0.0), make_particle(1.5, 0.0), 1.0, 0.9)
        constraint.breaking_strain = 0.1
        assert constraint.strain == pytest.approx(0.5)
        assert not constraint.has_broken()
        constraint.breakable = True
        assert constraint.has_broken()

    def test_references_by_identity(self, make_particle):
        p1 = make_particle(0.0, 0.0)
        p2 = make_particle(1.0, 0.0)
        twin = make_particle(0.0, 0.0)
        constraint = DistanceConstraint(p1, p2, 1.0, 0.9)
        assert constraint.kind is ConstraintKind.DISTANCE
        assert constraint.references(p1)
        assert constraint.references(p2)
        assert not constraint.references(twin)


class TestContactConstraint:

    def test_target_is_sum_of_radii(self, make_particle):
        contact = ContactConstraint(make_particle(0.0, 0.0, radius=0.5),
                                    make_particle(0.6, 0.0, radius=0.3))
        assert contact.kind is ConstraintKind.CONTACT
        assert contact.distance == pytest.approx(0.8)

    def test_pushes_overlapping_particles_apart(self, make_particle):
        p1 = make_particle(0.0, 0.0, radius=0.5)
        p2 = make_particle(0.6, 0.0, radius=0.5)
        ContactConstraint(p1, p2, 0.9).enforce(1)
        assert p2.pos.x - p1.pos.x == pytest.approx(0.96)

    def test_never_pulls_separated_particles_together(self, make_particle):
        p1 = make_particle(0.0, 0.0, radius=0.5)
        p2 = make_particle(1.5, 0.0, radius=0.5)
        ContactConstraint(p1, p2, 0.9).enforce(1)
        assert p1.pos.x == 0.0
        assert p2.pos.x == 1.5

    def test_expires_after_one_step(self, make_particle):
        contact = ContactConstraint(make_particle(0.0, 0.0), make_particle(0.1, 0.0))
        assert contact.lifetime == 0
        contact.advance_age()
        assert contact.has_expired()

    def test_is_never_breakable(self, make_particle):
        contact = ContactConstraint(make_particle(0.0, 0.0), make_particle(0.0, 0.0))
        contact.enforce(1)
        assert not contact.has_broken()


class TestPointConstraint:

    def test_full_stiffness_snaps_to_anchor(self, make_particle):
        p = make_particle(3.0, 4.0)
        constraint = PointConstraint(p, 0.0, 0.0, 1.0)
        constraint.enforce(1)
        assert constraint.kind is ConstraintKind.POINT
        assert p.pos.x == pytest.approx(0.0, abs=1e-12)
        assert p.pos.y == pytest.approx(0.0, abs=1e-12)

    def test_partial_stiffness_moves_along_line(self, make_particle):
        p = make_particle(0.0, 2.0)
        PointConstraint(p, 0.0, 0.0, 0.25).enforce(1)
        assert p.pos.x == 0.0
        assert p.pos.y == pytest.approx(1.5)

    def test_particle_at_anchor_is_untouched(self, make_particle):
        p = make_particle(1.0, 1.0)
        PointConstraint(p, 1.0, 1.0, 0.9).enforce(4)
        assert (p.pos.x, p.pos.y) == (1.0, 1.0)

    def test_fixed_particle_is_untouched(self, make_particle):
        p = make_particle(1.0, 1.0, fixed=True)
        PointConstraint(p, 5.0, 5.0, 1.0).enforce(1)
        assert (p.pos.x, p.pos.y) == (1.0, 1.0)

    def test_breaks_beyond_distance(self, make_particle):
        p = make_particle(0.0, 0.0)
        constraint = PointConstraint(p, 0.0, 0.0, 0.9)
        constraint.breakable = True
        constraint.breaking_strain = 1.0
        assert not constraint.has_broken()
        p.pos.x = 1.5
        assert constraint.has_broken()
