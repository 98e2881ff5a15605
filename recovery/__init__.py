"""
Recovery — Threshold Secret Reconstruction
Rebuild a Shamir-shared secret from any K of its shares.

Shares arrive as records written in mixed bases (hex, binary, decimal,
anything up to base 36). They are decoded to exact integers, the K with
the smallest x are selected, and the secret is recovered as f(0) by
Lagrange interpolation over a prime field (10^9 + 7 unless told
otherwise).

Usage:
    from recovery import combine_request, load_request
    result = combine_request(load_request("input.json"))
    print(result.secret)
"""

from recovery.bigbase import decode, parse_abscissa
from recovery.field import PrimeField, DEFAULT_MODULUS
from recovery.shamir import Point, reconstruct, interpolate, verify_points
from recovery.selector import ShareRecord, ReconstructionRequest, select, decode_record
from recovery.combine import ReconstructionResult, combine_request
from recovery.config import RecoveryConfig
from recovery.loader import (
    parse_document,
    load_request,
    load_sealed_request,
    seal_document,
    open_document,
)
from recovery.errors import (
    ReconstructionError,
    InvalidBase,
    InvalidDigit,
    InvalidThreshold,
    InsufficientShares,
    NoInverse,
    DuplicateAbscissa,
    MalformedDocument,
)

__version__ = "0.1.0"
__all__ = [
    "decode",
    "parse_abscissa",
    "PrimeField",
    "DEFAULT_MODULUS",
    "Point",
    "reconstruct",
    "interpolate",
    "verify_points",
    "ShareRecord",
    "ReconstructionRequest",
    "select",
    "decode_record",
    "ReconstructionResult",
    "combine_request",
    "RecoveryConfig",
    "parse_document",
    "load_request",
    "load_sealed_request",
    "seal_document",
    "open_document",
    "ReconstructionError",
    "InvalidBase",
    "InvalidDigit",
    "InvalidThreshold",
    "InsufficientShares",
    "NoInverse",
    "DuplicateAbscissa",
    "MalformedDocument",
]
