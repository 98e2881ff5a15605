"""
Prime Field Arithmetic
Exact modular arithmetic over a fixed prime modulus.

Every result is normalized into [0, M). Python's ``%`` already returns
a non-negative remainder for a positive modulus, and ints never
overflow, so there is no intermediate truncation to worry about.
"""

from recovery.errors import NoInverse

# 10^9 + 7, the reference share-format prime
DEFAULT_MODULUS = 1_000_000_007


class PrimeField:
    """
    Arithmetic modulo a fixed prime.

    The modulus is supplied at construction and threaded explicitly
    through the interpolator and selector, so alternate primes can be
    used without touching module state.

    Args:
        modulus: The prime modulus M. Primality is not checked.
    """

    def __init__(self, modulus: int = DEFAULT_MODULUS):
        if isinstance(modulus, bool) or not isinstance(modulus, int):
            raise ValueError(f"Modulus must be an integer, got {modulus!r}")
        if modulus < 2:
            raise ValueError(f"Modulus must be at least 2, got {modulus}")
        self.modulus = modulus

    def __repr__(self) -> str:
        return f"PrimeField({self.modulus})"

    def __eq__(self, other) -> bool:
        return isinstance(other, PrimeField) and other.modulus == self.modulus

    def __hash__(self) -> int:
        return hash(self.modulus)

    def normalize(self, a: int) -> int:
        """Reduce into [0, M), whatever the sign of ``a``."""
        return a % self.modulus

    def add(self, a: int, b: int) -> int:
        return (a + b) % self.modulus

    def sub(self, a: int, b: int) -> int:
        return (a - b) % self.modulus

    def neg(self, a: int) -> int:
        return -a % self.modulus

    def mul(self, a: int, b: int) -> int:
        return (a * b) % self.modulus

    def inverse(self, a: int) -> int:
        """
        Modular multiplicative inverse via the extended Euclidean algorithm.

        Args:
            a: Any integer; it is reduced first.

        Returns:
            ``a^-1 mod M`` in [0, M).

        Raises:
            NoInverse: If ``a ≡ 0`` or ``gcd(a, M) != 1``.
        """
        old_r, r = self.normalize(a), self.modulus
        if old_r == 0:
            raise NoInverse(f"0 has no inverse modulo {self.modulus}")

        old_s, s = 1, 0
        while r != 0:
            q = old_r // r
            old_r, r = r, old_r - q * r
            old_s, s = s, old_s - q * s

        # old_r is now gcd(a, M)
        if old_r != 1:
            raise NoInverse(f"{a} is not invertible modulo {self.modulus} (gcd {old_r})")
        return self.normalize(old_s)
