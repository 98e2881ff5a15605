"""
Share Documents
Read share documents into reconstruction requests, in the clear or sealed.

A share document is a JSON object. One reserved key holds the share
count and threshold; every other key is a share identifier (its
x-coordinate) mapping to the base and the value string:

    {
      "keys": {"n": 4, "k": 3},
      "1": {"base": "10", "value": "4"},
      "2": {"base": "2", "value": "111"},
      ...
    }

Documents carried between custodians can be sealed: the whole JSON
body is encrypted with AES-256-GCM under a key derived from a
passphrase via PBKDF2. The sealed form is itself a small JSON object.
"""

import base64
import json
import logging
import os
from pathlib import Path

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from recovery.bigbase import check_base
from recovery.config import RESERVED_KEY
from recovery.errors import InvalidBase, MalformedDocument
from recovery.selector import ReconstructionRequest, ShareRecord

logger = logging.getLogger(__name__)

# Sealing parameters
PBKDF2_ITERATIONS = 600_000  # OWASP recommended minimum
SALT_SIZE = 16
NONCE_SIZE = 12  # AES-256-GCM standard
KEY_SIZE = 32    # 256 bits
SEALED_FORMAT = "recovery-sealed-v1"

# Authenticated with the ciphertext so a sealed blob cannot be re-labelled
_SEAL_CONTEXT = SEALED_FORMAT.encode()


def _parse_base(identifier: str, raw) -> int:
    if isinstance(raw, str):
        try:
            raw = int(raw.strip(), 10)
        except ValueError:
            raise InvalidBase(f"Share {identifier!r} has a non-numeric base {raw!r}") from None
    return check_base(raw)


def _parse_int(raw, name: str) -> int:
    if isinstance(raw, str):
        try:
            return int(raw.strip(), 10)
        except ValueError:
            pass
    elif isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    raise MalformedDocument(f"{name!r} must be an integer, got {raw!r}")


def parse_document(document: dict, reserved_key: str = RESERVED_KEY) -> ReconstructionRequest:
    """
    Convert a decoded share document into a reconstruction request.

    Args:
        document: The parsed JSON object.
        reserved_key: Key that holds ``{"n": ..., "k": ...}``.

    Returns:
        A ReconstructionRequest with one ShareRecord per share entry,
        in document order.

    Raises:
        MalformedDocument: If the structure is wrong or fields are missing.
        InvalidBase: If a share declares an unusable base.
    """
    if not isinstance(document, dict):
        raise MalformedDocument(f"Share document must be an object, got {type(document).__name__}")

    keys = document.get(reserved_key)
    if not isinstance(keys, dict) or "k" not in keys:
        raise MalformedDocument(f"Share document is missing {reserved_key!r}.k")

    threshold = _parse_int(keys["k"], "k")
    declared_total = None
    if "n" in keys:
        # n is informational; a bad value is reported, not fatal
        try:
            declared_total = _parse_int(keys["n"], "n")
        except MalformedDocument as e:
            logger.warning("Ignoring declared share count: %s", e)

    records = []
    for identifier, entry in document.items():
        if identifier == reserved_key:
            continue
        if not isinstance(entry, dict):
            raise MalformedDocument(f"Share {identifier!r} must be an object")
        if "base" not in entry or "value" not in entry:
            raise MalformedDocument(f"Share {identifier!r} needs both 'base' and 'value'")
        if not isinstance(entry["value"], str):
            raise MalformedDocument(f"Share {identifier!r} value must be a string")

        records.append(ShareRecord(
            identifier=identifier,
            base=_parse_base(identifier, entry["base"]),
            value=entry["value"].strip(),
        ))

    logger.debug("Parsed share document: k=%d, %d records", threshold, len(records))
    return ReconstructionRequest(
        threshold=threshold,
        records=records,
        declared_total=declared_total,
    )


def read_document(path: str | Path) -> dict:
    """Read a JSON document from disk."""
    path = Path(path)
    try:
        return json.loads(path.read_bytes())
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedDocument(f"{path} is not valid JSON: {e}") from e


def load_request(path: str | Path, reserved_key: str = RESERVED_KEY) -> ReconstructionRequest:
    """Read and parse a plaintext share document."""
    return parse_document(read_document(path), reserved_key)


def derive_key(passphrase: str, salt: bytes) -> bytes:
    """Derive the sealing key from a passphrase using PBKDF2."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )
    return kdf.derive(passphrase.encode("utf-8"))


def seal_document(document: dict, passphrase: str) -> dict:
    """
    Encrypt a share document for transport or storage.

    Args:
        document: The plaintext share document.
        passphrase: Passphrase the recipient will need to open it.

    Returns:
        The sealed envelope: format tag, salt, nonce and ciphertext
        (base64 encoded).
    """
    salt = os.urandom(SALT_SIZE)
    nonce = os.urandom(NONCE_SIZE)
    aesgcm = AESGCM(derive_key(passphrase, salt))
    plaintext = json.dumps(document, sort_keys=True).encode()
    ciphertext = aesgcm.encrypt(nonce, plaintext, _SEAL_CONTEXT)
    return {
        "format": SEALED_FORMAT,
        "salt": base64.b64encode(salt).decode(),
        "nonce": base64.b64encode(nonce).decode(),
        "ciphertext": base64.b64encode(ciphertext).decode(),
    }


def open_document(sealed: dict, passphrase: str) -> dict:
    """
    Decrypt a sealed share document.

    Raises:
        MalformedDocument: If the envelope is not a sealed document,
            the passphrase is wrong, or the ciphertext was tampered with.
    """
    if not isinstance(sealed, dict) or sealed.get("format") != SEALED_FORMAT:
        raise MalformedDocument("Not a sealed share document")

    try:
        salt = base64.b64decode(sealed["salt"])
        nonce = base64.b64decode(sealed["nonce"])
        ciphertext = base64.b64decode(sealed["ciphertext"])
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedDocument(f"Sealed document is incomplete: {e}") from e

    if len(salt) != SALT_SIZE or len(nonce) != NONCE_SIZE:
        raise MalformedDocument("Sealed document has a corrupted salt or nonce")

    aesgcm = AESGCM(derive_key(passphrase, salt))
    try:
        plaintext = aesgcm.decrypt(nonce, ciphertext, _SEAL_CONTEXT)
    except (InvalidTag, ValueError):
        raise MalformedDocument("Cannot open sealed document: wrong passphrase or corrupted data") from None

    return json.loads(plaintext)


def write_sealed(path: str | Path, document: dict, passphrase: str) -> Path:
    """Seal a document and write the envelope to disk."""
    path = Path(path)
    path.write_text(json.dumps(seal_document(document, passphrase), indent=2))
    return path


def load_sealed_request(
    path: str | Path,
    passphrase: str,
    reserved_key: str = RESERVED_KEY,
) -> ReconstructionRequest:
    """Read, open and parse a sealed share document."""
    return parse_document(open_document(read_document(path), passphrase), reserved_key)
