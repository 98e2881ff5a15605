"""
Command line entry point.

    python -m recovery combine input.json
    python -m recovery combine shares.sealed.json --passphrase-env SHARE_PASSPHRASE
    python -m recovery seal input.json shares.sealed.json --passphrase-env SHARE_PASSPHRASE
"""

import argparse
import json
import logging
import os
import sys

from recovery.combine import combine_request
from recovery.config import RecoveryConfig, RESERVED_KEY
from recovery.errors import ReconstructionError
from recovery.field import DEFAULT_MODULUS
from recovery.loader import (
    SEALED_FORMAT,
    parse_document,
    open_document,
    read_document,
    write_sealed,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def _passphrase(env_var: str | None) -> str | None:
    if not env_var:
        return None
    value = os.environ.get(env_var)
    if value is None:
        print(f"error: environment variable {env_var} is not set", file=sys.stderr)
    return value


def cmd_combine(args) -> int:
    config = RecoveryConfig(
        modulus=args.modulus,
        reserved_key=args.reserved_key,
        verify_surplus=not args.no_verify,
    )

    try:
        field = config.field()
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE

    try:
        document = read_document(args.input)
        if isinstance(document, dict) and document.get("format") == SEALED_FORMAT:
            logger.debug("Opening sealed document %s", args.input)
            passphrase = _passphrase(args.passphrase_env)
            if passphrase is None:
                print("error: sealed document needs --passphrase-env", file=sys.stderr)
                return EXIT_USAGE
            document = open_document(document, passphrase)
        request = parse_document(document, config.reserved_key)
    except ReconstructionError as e:
        print(f"❌ {e.describe()}", file=sys.stderr)
        return EXIT_FAILED

    result = combine_request(request, field, verify_surplus=config.verify_surplus)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif result.success:
        print(f"✅ Secret (constant term at x=0): {result.secret}")
        print(f"   Used {result.points_used} of {result.total_points} shares")
        if result.inconsistent:
            print(f"   ⚠ Shares off the polynomial: {', '.join(str(x) for x in result.inconsistent)}")
    else:
        print(f"❌ {result.error.describe()}", file=sys.stderr)

    return EXIT_OK if result.success else EXIT_FAILED


def cmd_seal(args) -> int:
    passphrase = _passphrase(args.passphrase_env)
    if passphrase is None:
        return EXIT_USAGE
    try:
        document = read_document(args.input)
        # Refuse to seal something that would not parse on the other side
        parse_document(document, args.reserved_key)
    except ReconstructionError as e:
        print(f"❌ {e.describe()}", file=sys.stderr)
        return EXIT_FAILED

    path = write_sealed(args.output, document, passphrase)
    print(f"Sealed {args.input} -> {path}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recovery",
        description="Reconstruct a Shamir-shared secret from a threshold of shares.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    combine = sub.add_parser("combine", help="Reconstruct the secret from a share document")
    combine.add_argument("input", help="Share document (plain or sealed JSON)")
    combine.add_argument("--passphrase-env", metavar="VAR",
                         help="Environment variable holding the passphrase of a sealed document")
    combine.add_argument("--modulus", type=int, default=DEFAULT_MODULUS,
                         help=f"Prime field modulus (default {DEFAULT_MODULUS})")
    combine.add_argument("--reserved-key", default=RESERVED_KEY,
                         help=f"Document key holding n and k (default {RESERVED_KEY!r})")
    combine.add_argument("--no-verify", action="store_true",
                         help="Skip checking surplus shares against the polynomial")
    combine.add_argument("--json", action="store_true", help="Print the result as JSON")
    combine.set_defaults(func=cmd_combine)

    seal = sub.add_parser("seal", help="Encrypt a share document with a passphrase")
    seal.add_argument("input", help="Plaintext share document")
    seal.add_argument("output", help="Where to write the sealed document")
    seal.add_argument("--passphrase-env", metavar="VAR", required=True,
                      help="Environment variable holding the passphrase")
    seal.add_argument("--reserved-key", default=RESERVED_KEY,
                      help=f"Document key holding n and k (default {RESERVED_KEY!r})")
    seal.set_defaults(func=cmd_seal)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        return args.func(args)
    except FileNotFoundError as e:
        print(f"error: {e.filename}: no such file", file=sys.stderr)
        return EXIT_USAGE
