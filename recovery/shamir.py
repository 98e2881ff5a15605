"""
Shamir Reconstruction
Recover the secret from K points using Lagrange interpolation.

A secret split with Shamir's scheme is the constant term of a
polynomial of degree K-1 over a prime field. Each share is a point
(x, f(x)) on that polynomial. Any K of them pin the polynomial down,
and evaluating it at x = 0 gives back f(0) = secret.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from recovery.errors import DuplicateAbscissa, InsufficientShares, NoInverse
from recovery.field import PrimeField

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Point:
    """A single decoded share."""
    x: int  # The x-coordinate (share identifier)
    y: int  # The y-coordinate, reduced into the field

    def to_dict(self) -> dict:
        """Render with decimal strings, safe for JSON consumers."""
        return {"x": str(self.x), "y": str(self.y)}


def _colliding_index(points: Sequence[Point], i: int, field: PrimeField) -> int | None:
    """Index of another point whose x equals points[i].x modulo M, if any."""
    xi = field.normalize(points[i].x)
    for j, point_j in enumerate(points):
        if j != i and field.normalize(point_j.x) == xi:
            return j
    return None


def interpolate(points: Sequence[Point], x: int, field: PrimeField) -> int:
    """
    Evaluate the interpolating polynomial through ``points`` at ``x``.

    Args:
        points: The K points defining a degree K-1 polynomial.
        x: Where to evaluate it.
        field: The prime field to work in.

    Returns:
        f(x) in [0, M).

    Raises:
        InsufficientShares: If no points are given.
        DuplicateAbscissa: If two points share an x-coordinate mod M.
        NoInverse: If x values are distinct but a denominator still has
            no inverse (only possible when M is not prime).
    """
    if not points:
        raise InsufficientShares("Need at least 1 point to interpolate")

    result = 0
    for i, point_i in enumerate(points):
        xi = point_i.x
        yi = point_i.y

        # Lagrange basis polynomial for point i, evaluated at x
        numerator = 1
        denominator = 1
        for j, point_j in enumerate(points):
            if i == j:
                continue
            xj = point_j.x
            numerator = field.mul(numerator, x - xj)
            denominator = field.mul(denominator, xi - xj)

        try:
            inv = field.inverse(denominator)
        except NoInverse as e:
            j = _colliding_index(points, i, field)
            if j is None:
                # Distinct x, but the modulus is not prime
                raise
            raise DuplicateAbscissa(
                f"Points {i} and {j} have the same x modulo {field.modulus}"
            ) from e

        term = field.mul(field.mul(yi, numerator), inv)
        result = field.add(result, term)

    return field.normalize(result)


def reconstruct(points: Sequence[Point], field: PrimeField) -> int:
    """
    Reconstruct the secret f(0) from exactly the given points.

    All points are used; pass only the K you selected. With a single
    point the empty products are 1 and its y-value comes straight back.

    Raises:
        InsufficientShares: If no points are given.
        DuplicateAbscissa: If two points share an x-coordinate mod M.
    """
    logger.debug("Interpolating %d points at x=0 over %r", len(points), field)
    return interpolate(points, 0, field)


def verify_points(points: Sequence[Point], secret: int, field: PrimeField) -> bool:
    """Check that a set of points reconstructs the expected secret."""
    try:
        return reconstruct(points, field) == field.normalize(secret)
    except (InsufficientShares, NoInverse):
        return False
