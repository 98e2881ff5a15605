"""
Tests for Lagrange reconstruction, share selection and the request combiner.
"""

import itertools
import random
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from recovery.combine import combine_request
from recovery.errors import (
    DuplicateAbscissa,
    InsufficientShares,
    InvalidBase,
    InvalidDigit,
    InvalidThreshold,
    NoInverse,
)
from recovery.field import PrimeField, DEFAULT_MODULUS
from recovery.selector import ReconstructionRequest, ShareRecord, decode_record, partition, select
from recovery.shamir import Point, interpolate, reconstruct, verify_points

FIELD = PrimeField()


def _split(secret: int, threshold: int, xs: list[int], field: PrimeField, rng: random.Random) -> list[Point]:
    """Evaluate a random degree threshold-1 polynomial with f(0) = secret at each x."""
    coefficients = [secret] + [rng.randrange(field.modulus) for _ in range(threshold - 1)]
    points = []
    for x in xs:
        y = 0
        for coeff in reversed(coefficients):
            y = (y * x + coeff) % field.modulus
        points.append(Point(x=x, y=y))
    return points


def _to_record(point: Point, base: int) -> ShareRecord:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    value, y = "", point.y
    while True:
        y, d = divmod(y, base)
        value = digits[d] + value
        if y == 0:
            break
    return ShareRecord(identifier=str(point.x), base=base, value=value)


def test_reconstruct_known_polynomial():
    """Test f(x) = x^2 + 3 from (1, 4), (2, 7), (3, 12)."""
    print("Testing reconstruct (known polynomial)...", end=" ")
    points = [Point(1, 4), Point(2, 7), Point(3, 12)]
    assert reconstruct(points, FIELD) == 3
    assert interpolate(points, 6, FIELD) == 39
    print("PASS")


def test_round_trip_random_polynomials():
    """Test that K shares of a random polynomial give back its constant term."""
    print("Testing round-trip (random polynomials)...", end=" ")
    rng = random.Random(2024)
    for threshold in range(1, 8):
        secret = rng.randrange(DEFAULT_MODULUS)
        xs = rng.sample(range(1, 10_000), threshold + 3)
        shares = _split(secret, threshold, xs, FIELD, rng)
        assert reconstruct(shares[:threshold], FIELD) == secret
        assert reconstruct(shares[-threshold:], FIELD) == secret
    print("PASS")


def test_any_k_subset_any_order():
    """Test every K-subset, in every order, gives the same secret."""
    print("Testing permutation invariance...", end=" ")
    rng = random.Random(99)
    secret = rng.randrange(DEFAULT_MODULUS)
    shares = _split(secret, 3, [1, 2, 3, 4, 5, 6], FIELD, rng)

    tested = 0
    for combo in itertools.combinations(shares, 3):
        for ordering in itertools.permutations(combo):
            assert reconstruct(list(ordering), FIELD) == secret
            tested += 1

    # 6 choose 3 = 20 subsets, 6 orderings each
    assert tested == 120
    print(f"PASS ({tested} orderings)")


def test_alternate_modulus():
    """Test reconstruction over a different prime."""
    print("Testing alternate modulus...", end=" ")
    field = PrimeField(2 ** 127 - 1)
    rng = random.Random(5)
    secret = rng.randrange(field.modulus)
    shares = _split(secret, 4, [10, 20, 30, 40], field, rng)
    assert reconstruct(shares, field) == secret
    print("PASS")


def test_single_point():
    """Test K = 1 returns the point's y-value reduced into the field."""
    print("Testing K = 1...", end=" ")
    assert reconstruct([Point(5, 42)], FIELD) == 42
    assert reconstruct([Point(5, DEFAULT_MODULUS + 42)], FIELD) == 42
    print("PASS")


def test_empty_points_fail():
    """Test that interpolating nothing is refused."""
    print("Testing empty point set...", end=" ")
    try:
        reconstruct([], FIELD)
        raise AssertionError("should have raised InsufficientShares")
    except InsufficientShares:
        pass
    print("PASS")


def test_duplicate_abscissa():
    """Test duplicate x, including x that collide only modulo M."""
    print("Testing duplicate abscissa...", end=" ")
    for points in (
        [Point(1, 4), Point(1, 5), Point(3, 12)],
        [Point(2, 7), Point(2 + DEFAULT_MODULUS, 7)],
    ):
        try:
            reconstruct(points, FIELD)
            raise AssertionError("should have raised DuplicateAbscissa")
        except DuplicateAbscissa:
            pass
    print("PASS")


def test_composite_modulus_not_duplicate():
    """Test distinct x over a composite modulus report NoInverse, not a collision."""
    print("Testing composite modulus...", end=" ")
    field = PrimeField(10)
    points = [Point(1, 4), Point(3, 2)]
    try:
        reconstruct(points, field)
        raise AssertionError("should have raised NoInverse")
    except DuplicateAbscissa:
        raise AssertionError("x=1 and x=3 are distinct modulo 10")
    except NoInverse:
        pass

    # A real collision is still named as one
    try:
        reconstruct([Point(1, 4), Point(11, 2)], field)
        raise AssertionError("should have raised DuplicateAbscissa")
    except DuplicateAbscissa:
        pass

    result = combine_request(ReconstructionRequest(2, [ShareRecord("1", 10, "4"), ShareRecord("3", 10, "2")]), field)
    assert not result.success
    assert result.error_kind == "NoInverse"
    print("PASS")


def test_duplicate_abscissa_huge_x():
    """Test the collision error renders even when x is enormous."""
    print("Testing duplicate abscissa with huge x...", end=" ")
    big = 10 ** 5000
    try:
        reconstruct([Point(big, 1), Point(big + DEFAULT_MODULUS, 2)], FIELD)
        raise AssertionError("should have raised DuplicateAbscissa")
    except DuplicateAbscissa as e:
        assert "Points 0 and 1" in str(e)
    print("PASS")


def test_combine_overlong_identifier():
    """Test an identifier too long to render is a tagged InvalidDigit, not a crash."""
    print("Testing overlong identifier...", end=" ")
    result = combine_request(ReconstructionRequest(1, [ShareRecord("1" * 5000, 10, "42")]))
    assert not result.success
    assert result.error_kind == "InvalidDigit"
    payload = result.to_dict()
    assert payload["kind"] == "InvalidDigit"

    # Long but renderable identifiers still work end to end
    long_id = "9" * 4000
    result = combine_request(ReconstructionRequest(1, [ShareRecord(long_id, 10, "42")]))
    assert result.success
    assert result.to_dict()["points"] == [{"x": long_id, "y": "42"}]
    print("PASS")


def test_verify_points():
    """Test the verification helper."""
    print("Testing verify_points...", end=" ")
    points = [Point(1, 4), Point(2, 7), Point(3, 12)]
    assert verify_points(points, 3, FIELD)
    assert verify_points(points, 3 + DEFAULT_MODULUS, FIELD)
    assert not verify_points(points, 4, FIELD)
    assert not verify_points([Point(1, 4), Point(1, 4)], 4, FIELD)
    print("PASS")


def test_select_orders_by_x_and_truncates():
    """Test selection sorts by ascending x and keeps the first K."""
    print("Testing select...", end=" ")
    records = [
        ShareRecord("6", 4, "213"),
        ShareRecord("2", 2, "111"),
        ShareRecord("3", 10, "12"),
        ShareRecord("1", 10, "4"),
    ]
    points = select(records, 3, FIELD)
    assert points == [Point(1, 4), Point(2, 7), Point(3, 12)]

    selected, surplus = partition(records, 3, FIELD)
    assert selected == points
    assert surplus == [Point(6, 39)]
    print("PASS")


def test_select_reduces_y():
    """Test y-values are reduced into the field at decode time."""
    print("Testing select reduces y...", end=" ")
    big = DEFAULT_MODULUS * 3 + 11
    point = decode_record(ShareRecord("9", 16, format(big, "x")), FIELD)
    assert point == Point(9, 11)
    print("PASS")


def test_select_insufficient_shares():
    """Test K = 3 with only 2 records."""
    print("Testing insufficient shares...", end=" ")
    records = [ShareRecord("1", 10, "4"), ShareRecord("2", 10, "7")]
    try:
        select(records, 3, FIELD)
        raise AssertionError("should have raised InsufficientShares")
    except InsufficientShares:
        pass
    print("PASS")


def test_select_bad_threshold():
    """Test K below 1 is refused."""
    print("Testing bad threshold...", end=" ")
    records = [ShareRecord("1", 10, "4")]
    for k in [0, -1, "1"]:
        try:
            select(records, k, FIELD)
            raise AssertionError(f"k={k!r} should have raised InvalidThreshold")
        except InvalidThreshold:
            pass
    print("PASS")


def test_select_propagates_decode_errors():
    """Test a bad record surfaces its decode error."""
    print("Testing decode errors in select...", end=" ")
    try:
        select([ShareRecord("1", 2, "102")], 1, FIELD)
        raise AssertionError("should have raised InvalidDigit")
    except InvalidDigit:
        pass
    try:
        select([ShareRecord("1", 1, "0")], 1, FIELD)
        raise AssertionError("should have raised InvalidBase")
    except InvalidBase:
        pass
    print("PASS")


def test_combine_mixed_bases():
    """Test a full request with shares written in different bases."""
    print("Testing combine (mixed bases)...", end=" ")
    # f(x) = 5 + 2x + 3x^2
    request = ReconstructionRequest(
        threshold=3,
        records=[
            ShareRecord("4", 8, "75"),      # 61
            ShareRecord("1", 16, "A"),      # 10
            ShareRecord("3", 36, "12"),     # 38
            ShareRecord("2", 2, "10101"),   # 21
        ],
        declared_total=4,
    )
    result = combine_request(request)
    assert result.success
    assert result.secret == 5
    assert result.points_used == 3
    assert result.total_points == 4
    assert result.inconsistent == []

    payload = result.to_dict()
    assert payload["success"] is True
    assert payload["secret"] == "5"
    assert payload["pointsUsed"] == 3
    assert payload["totalPoints"] == 4
    assert payload["points"] == [
        {"x": "1", "y": "10"},
        {"x": "2", "y": "21"},
        {"x": "3", "y": "38"},
    ]
    print("PASS")


def test_combine_reports_inconsistent_surplus():
    """Test surplus shares off the polynomial are reported, not fatal."""
    print("Testing combine flags bad surplus shares...", end=" ")
    request = ReconstructionRequest(
        threshold=3,
        records=[
            ShareRecord("1", 10, "4"),
            ShareRecord("2", 10, "7"),
            ShareRecord("3", 10, "12"),
            ShareRecord("4", 10, "19"),   # on x^2 + 3
            ShareRecord("5", 10, "999"),  # corrupted
        ],
    )
    result = combine_request(request)
    assert result.success
    assert result.secret == 3
    assert result.inconsistent == [5]
    assert result.to_dict()["inconsistent"] == ["5"]

    unchecked = combine_request(request, verify_surplus=False)
    assert unchecked.success
    assert unchecked.inconsistent == []
    print("PASS")


def test_combine_failures_are_tagged():
    """Test errors come back as tagged failure results."""
    print("Testing combine failure results...", end=" ")
    cases = [
        (ReconstructionRequest(3, [ShareRecord("1", 10, "4"), ShareRecord("2", 10, "7")]),
         "InsufficientShares"),
        (ReconstructionRequest(2, [ShareRecord("5", 10, "4"), ShareRecord("05", 10, "7")]),
         "DuplicateAbscissa"),
        (ReconstructionRequest(1, [ShareRecord("1", 16, "xyz")]), "InvalidDigit"),
        (ReconstructionRequest(1, [ShareRecord("1", 40, "1")]), "InvalidBase"),
        (ReconstructionRequest(0, [ShareRecord("1", 10, "1")]), "InvalidThreshold"),
    ]
    for request, kind in cases:
        result = combine_request(request)
        assert not result.success
        assert result.error_kind == kind, f"expected {kind}, got {result.error_kind}"
        payload = result.to_dict()
        assert payload["success"] is False
        assert payload["kind"] == kind
        assert payload["error"].startswith(f"{kind}: ")
    print("PASS")


def test_combine_deterministic_selection():
    """Test the same shares give the same selected points on every run."""
    print("Testing deterministic selection...", end=" ")
    rng = random.Random(11)
    secret = rng.randrange(DEFAULT_MODULUS)
    shares = _split(secret, 4, [9, 3, 27, 1, 81, 5, 243], FIELD, rng)
    records = [_to_record(p, rng.choice([2, 10, 16, 36])) for p in shares]

    first = combine_request(ReconstructionRequest(4, records))
    rng.shuffle(records)
    second = combine_request(ReconstructionRequest(4, records))

    assert first.secret == second.secret == secret
    assert [p.x for p in first.points] == [p.x for p in second.points] == [1, 3, 5, 9]
    assert first.inconsistent == []
    print("PASS")


def main():
    print("=" * 50)
    print("  Shamir Reconstruction Tests")
    print("=" * 50)
    print()

    tests = [
        test_reconstruct_known_polynomial,
        test_round_trip_random_polynomials,
        test_any_k_subset_any_order,
        test_alternate_modulus,
        test_single_point,
        test_empty_points_fail,
        test_duplicate_abscissa,
        test_composite_modulus_not_duplicate,
        test_duplicate_abscissa_huge_x,
        test_verify_points,
        test_select_orders_by_x_and_truncates,
        test_select_reduces_y,
        test_select_insufficient_shares,
        test_select_bad_threshold,
        test_select_propagates_decode_errors,
        test_combine_mixed_bases,
        test_combine_reports_inconsistent_surplus,
        test_combine_failures_are_tagged,
        test_combine_deterministic_selection,
        test_combine_overlong_identifier,
    ]

    passed = 0
    failed = 0

    for test in tests:
        try:
            test()
            passed += 1
        except Exception as e:
            print(f"FAIL: {e}")
            import traceback
            traceback.print_exc()
            failed += 1

    print()
    print(f"Results: {passed} passed, {failed} failed")
    return failed == 0


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
