"""
Share Selection
Decode raw share records into points and pick the K to interpolate.

Any K valid points reconstruct the same secret, so which K are used
only matters for reproducibility. The policy here is fixed: sort by
ascending x (stable) and take the first K.
"""

import logging
from dataclasses import dataclass, field as dataclass_field
from typing import Iterable, Sequence

from recovery.bigbase import decode, parse_abscissa
from recovery.errors import InsufficientShares, InvalidThreshold
from recovery.field import PrimeField
from recovery.shamir import Point

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShareRecord:
    """One share as it arrives from a document, before decoding."""
    identifier: str  # Decimal x-coordinate
    base: int        # Radix of ``value``
    value: str       # y, written in ``base``


@dataclass
class ReconstructionRequest:
    """A threshold plus the share records offered to meet it."""
    threshold: int
    records: list[ShareRecord] = dataclass_field(default_factory=list)
    declared_total: int | None = None  # The document's own share count, if any


def check_threshold(k) -> int:
    """Validate the threshold and return it."""
    if isinstance(k, bool) or not isinstance(k, int):
        raise InvalidThreshold(f"Threshold must be an integer, got {k!r}")
    if k < 1:
        raise InvalidThreshold(f"Threshold must be at least 1, got {k}")
    return k


def decode_record(record: ShareRecord, field: PrimeField) -> Point:
    """
    Decode one record into a point.

    Raises:
        InvalidDigit: If the identifier or value is not valid in its base.
        InvalidBase: If the declared base is outside 2..36.
    """
    x = parse_abscissa(record.identifier)
    y = field.normalize(decode(record.value, record.base))
    return Point(x=x, y=y)


def decode_records(records: Iterable[ShareRecord], field: PrimeField) -> list[Point]:
    """Decode every record, sorted by ascending x."""
    points = [decode_record(record, field) for record in records]
    # sorted() is stable, so equal x keep document order
    return sorted(points, key=lambda p: p.x)


def partition(
    records: Sequence[ShareRecord],
    k: int,
    field: PrimeField,
) -> tuple[list[Point], list[Point]]:
    """
    Decode all records and split them into the K selected points and the rest.

    Args:
        records: Every share record offered.
        k: The threshold.
        field: Field that y-values are reduced into.

    Returns:
        ``(selected, surplus)``: the K points with the smallest x, then
        the remaining points, both in ascending x order.

    Raises:
        InvalidThreshold: If k is not a positive integer.
        InsufficientShares: If fewer than k records were supplied.
        InvalidBase, InvalidDigit: If any record fails to decode.
    """
    check_threshold(k)
    points = decode_records(records, field)

    if len(points) < k:
        raise InsufficientShares(f"Need at least {k} shares, got {len(points)}")

    logger.debug("Selected %d of %d points", k, len(points))
    return points[:k], points[k:]


def select(records: Sequence[ShareRecord], k: int, field: PrimeField) -> list[Point]:
    """Decode all records and return the K points used for reconstruction."""
    selected, _ = partition(records, k, field)
    return selected
