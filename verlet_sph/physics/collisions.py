"""Particle-particle overlap detection."""

from typing import List, Sequence

from ..core.constraints import ContactConstraint
from ..core.particles import Particle


def detect_contacts(particles: Sequence[Particle], stiffness: float = 0.9) -> List[ContactConstraint]:
    """Brute-force O(N²) overlap scan over colliding particles.

    Every pair (i < j) of colliding particles whose centres are closer than
    the sum of their radii yields one contact constraint for this step.

    Args:
        particles: All particles in the world, in insertion order
        stiffness: Stiffness of the generated contacts

    Returns:
        New contact constraints, in pair order
    """
    colliders = [p for p in particles if p.collides]
    contacts = []
    for i, p1 in enumerate(colliders):
        x1, y1, r1 = p1.pos.x, p1.pos.y, p1.radius
        for p2 in colliders[i + 1:]:
            dx = x1 - p2.pos.x
            dy = y1 - p2.pos.y
            reach = r1 + p2.radius
            if dx * dx + dy * dy < reach * reach:
                contacts.append(ContactConstraint(p1, p2, stiffness))
    return contacts
