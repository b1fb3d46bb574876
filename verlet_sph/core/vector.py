"""
2D vector value type used for particle state.

Two families of operations:
- Value-producing (add, subtract, scale, ...) return a new Vector2
- In-place (add_to_this, scale_this, ...) mutate the receiver for hot loops
"""

import math

from ..errors import DegenerateGeometry


class Vector2:
    """Mutable (x, y) pair of floats."""

    __slots__ = ("x", "y")

    def __init__(self, x: float = 0.0, y: float = 0.0):
        self.x = float(x)
        self.y = float(y)

    def __repr__(self) -> str:
        return f"Vector2({self.x!r}, {self.y!r})"

    def copy(self) -> "Vector2":
        return Vector2(self.x, self.y)

    # Value-producing operations

    def magnitude_squared(self) -> float:
        return self.x * self.x + self.y * self.y

    def magnitude(self) -> float:
        return math.sqrt(self.magnitude_squared())

    def unit_vector(self) -> "Vector2":
        """Unit vector in the same direction.

        Raises:
            DegenerateGeometry: If the vector has zero length
        """
        length = self.magnitude()
        if length == 0.0:
            raise DegenerateGeometry("unit vector of a zero-length vector")
        return Vector2(self.x / length, self.y / length)

    def add(self, v: "Vector2") -> "Vector2":
        return Vector2(self.x + v.x, self.y + v.y)

    def subtract(self, v: "Vector2") -> "Vector2":
        return Vector2(self.x - v.x, self.y - v.y)

    def scale(self, scalar: float) -> "Vector2":
        return Vector2(scalar * self.x, scalar * self.y)

    def rotate_about(self, v: "Vector2", angle: float) -> "Vector2":
        """Rotate counter-clockwise about point v by angle (radians)."""
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        dx = self.x - v.x
        dy = self.y - v.y
        return Vector2(v.x + dx * cos_a - dy * sin_a,
                       v.y + dx * sin_a + dy * cos_a)

    def distance_from_squared(self, v: "Vector2") -> float:
        dx = v.x - self.x
        dy = v.y - self.y
        return dx * dx + dy * dy

    def distance_from(self, v: "Vector2") -> float:
        return math.sqrt(self.distance_from_squared(v))

    # In-place operations

    def add_to_this(self, v: "Vector2") -> None:
        self.x += v.x
        self.y += v.y

    def subtract_from_this(self, v: "Vector2") -> None:
        self.x -= v.x
        self.y -= v.y

    def scale_this(self, scalar: float) -> None:
        self.x *= scalar
        self.y *= scalar

    def set_to(self, v: "Vector2") -> None:
        self.x = v.x
        self.y = v.y

    def set_to_zero(self) -> None:
        self.x = 0.0
        self.y = 0.0
