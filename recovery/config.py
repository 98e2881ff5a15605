"""
Recovery configuration.
"""

from dataclasses import dataclass

from recovery.field import DEFAULT_MODULUS, PrimeField

# Key in a share document that holds {"n": ..., "k": ...} instead of a share
RESERVED_KEY = "keys"


@dataclass
class RecoveryConfig:
    """Settings for one reconstruction run."""
    modulus: int = DEFAULT_MODULUS
    reserved_key: str = RESERVED_KEY
    verify_surplus: bool = True  # Check unused shares against the polynomial

    def field(self) -> PrimeField:
        return PrimeField(self.modulus)
