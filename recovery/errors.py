"""
Reconstruction Errors
Every failure the recovery pipeline can report.

Each error carries a ``kind`` tag so callers can surface it as a
tagged failure result instead of a traceback. All of them are
ValueErrors: bad share input is bad input, nothing more.
"""


class ReconstructionError(ValueError):
    """Base class for all share decoding and reconstruction failures."""

    kind = "ReconstructionError"

    def describe(self) -> str:
        """Render as ``Kind: message`` for result payloads."""
        return f"{self.kind}: {self}"


class InvalidBase(ReconstructionError):
    """A share record declared a base outside 2..36."""

    kind = "InvalidBase"


class InvalidDigit(ReconstructionError):
    """A value string contains a character that is not a digit of its base."""

    kind = "InvalidDigit"


class InvalidThreshold(ReconstructionError):
    """The threshold k is not a positive integer."""

    kind = "InvalidThreshold"


class InsufficientShares(ReconstructionError):
    """Fewer shares were supplied than the threshold requires."""

    kind = "InsufficientShares"


class NoInverse(ReconstructionError):
    """A value has no multiplicative inverse modulo the field prime."""

    kind = "NoInverse"


class DuplicateAbscissa(NoInverse):
    """Two selected shares have the same x-coordinate modulo the prime."""

    kind = "DuplicateAbscissa"


class MalformedDocument(ReconstructionError):
    """A share document could not be read, decrypted or parsed."""

    kind = "MalformedDocument"
