"""
Request Combiner
Run the full pipeline on a reconstruction request and report the outcome.

    records -> decode -> select K by ascending x -> interpolate at 0 -> secret

Failures are not raised to the caller: they come back as a tagged
result, so whoever presents it (CLI, service, test) decides what a
failure means. Nothing is retried; the computation is deterministic.
"""

import logging
from dataclasses import dataclass, field as dataclass_field

from recovery.errors import ReconstructionError
from recovery.field import PrimeField
from recovery.selector import ReconstructionRequest, partition
from recovery.shamir import Point, interpolate, reconstruct

logger = logging.getLogger(__name__)


@dataclass
class ReconstructionResult:
    """Outcome of one reconstruction: a secret, or a tagged error."""
    success: bool
    secret: int | None = None
    points: list[Point] = dataclass_field(default_factory=list)
    total_points: int = 0
    inconsistent: list[int] = dataclass_field(default_factory=list)
    error: ReconstructionError | None = None

    @property
    def points_used(self) -> int:
        return len(self.points)

    @property
    def error_kind(self) -> str | None:
        return self.error.kind if self.error else None

    def to_dict(self) -> dict:
        """Serialize to the portable result shape (integers as decimal strings)."""
        if not self.success:
            return {
                "success": False,
                "kind": self.error_kind,
                "error": self.error.describe(),
            }
        return {
            "success": True,
            "secret": str(self.secret),
            "pointsUsed": self.points_used,
            "totalPoints": self.total_points,
            "points": [p.to_dict() for p in self.points],
            "inconsistent": [str(x) for x in self.inconsistent],
        }


def find_inconsistent(selected: list[Point], surplus: list[Point], field: PrimeField) -> list[int]:
    """Return the x of every surplus point that is off the selected polynomial."""
    return [
        p.x for p in surplus
        if interpolate(selected, p.x, field) != p.y
    ]


def combine_request(
    request: ReconstructionRequest,
    field: PrimeField | None = None,
    verify_surplus: bool = True,
) -> ReconstructionResult:
    """
    Reconstruct the secret for a request.

    Args:
        request: The threshold and the share records offered.
        field: Prime field to work in. Defaults to the 10^9+7 field.
        verify_surplus: Check the shares beyond K against the
            reconstructed polynomial and report the ones that disagree.

    Returns:
        A ReconstructionResult; ``success`` is False if any
        ReconstructionError was raised along the way.
    """
    field = field or PrimeField()
    total = len(request.records)

    if request.declared_total is not None and request.declared_total != total:
        logger.warning(
            "Document declares %d shares but %d were supplied",
            request.declared_total, total,
        )

    try:
        selected, surplus = partition(request.records, request.threshold, field)
        secret = reconstruct(selected, field)
        inconsistent = []
        if verify_surplus and surplus:
            inconsistent = find_inconsistent(selected, surplus, field)
    except ReconstructionError as e:
        logger.debug("Reconstruction failed: %s", e.describe())
        return ReconstructionResult(success=False, total_points=total, error=e)

    if inconsistent:
        logger.warning(
            "%d of %d surplus shares do not lie on the reconstructed polynomial: x=%s",
            len(inconsistent), len(surplus), ", ".join(str(x) for x in inconsistent),
        )

    return ReconstructionResult(
        success=True,
        secret=secret,
        points=selected,
        total_points=total,
        inconsistent=inconsistent,
    )
