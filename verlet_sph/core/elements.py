"""Aging and expiry shared by particles and constraints."""

from typing import Optional


class WorldElement:
    """Mixin giving an entity an age (in steps) and an optional lifetime.

    ``lifetime`` is the age at which the element expires; ``None`` means the
    element never expires.
    """

    def __init__(self, lifetime: Optional[int] = None):
        self.age = 0
        self.lifetime = lifetime

    def advance_age(self) -> None:
        self.age += 1

    def has_expired(self) -> bool:
        return self.lifetime is not None and self.age >= self.lifetime
