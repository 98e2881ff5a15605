"""
Recovery — Basic Usage Example

Reconstructs a secret from a share document whose values are written
in different bases, then shows what happens with too few shares and
with a sealed copy of the same document.
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from recovery import (
    ReconstructionRequest,
    combine_request,
    load_request,
    load_sealed_request,
)
from recovery.loader import read_document, write_sealed


def main():
    input_file = Path(__file__).parent / "input.json"

    print("=" * 50)
    print("  Recovery — Threshold Secret Reconstruction")
    print("=" * 50)

    request = load_request(input_file)
    print(f"\nThreshold k={request.threshold}, {len(request.records)} shares offered")
    for record in request.records:
        print(f"  x={record.identifier}: {record.value!r} in base {record.base}")

    result = combine_request(request)
    print(f"\nSecret (constant term at x=0): {result.secret}")
    print(f"Points used: {[(p.x, p.y) for p in result.points]}")
    print(f"Surplus shares off the polynomial: {result.inconsistent or 'none'}")

    # Drop below the threshold
    print("\nAttempting reconstruction with only 2 shares...")
    short = ReconstructionRequest(threshold=request.threshold, records=request.records[:2])
    failed = combine_request(short)
    print(f"  {failed.to_dict()}")

    # Seal the document and read it back
    passphrase = "my-secret-passphrase-change-this"
    sealed_file = Path("./example-shares.sealed.json")
    write_sealed(sealed_file, read_document(input_file), passphrase)
    sealed_result = combine_request(load_sealed_request(sealed_file, passphrase))
    print(f"\nFrom sealed copy: {sealed_result.secret}")

    sealed_file.unlink()
    print("Cleaned up example files.")


if __name__ == "__main__":
    main()
