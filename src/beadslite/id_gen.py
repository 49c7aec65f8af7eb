"""Hash-based issue ID generation.

IDs look like ``bl-a3f2``: a constant prefix plus a short base36 digest of
the issue's title, description and creation instant. They are compact and
collision-resistant rather than sequential.
"""

from __future__ import annotations

import hashlib

DEFAULT_PREFIX = "bl"
DEFAULT_ID_LENGTH = 4

BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def encode_base36(data: bytes, length: int) -> str:
    """Convert bytes to a base36 string of exactly ``length`` characters."""
    # Convert bytes to big integer
    num = int.from_bytes(data, byteorder="big")

    chars: list[str] = []
    while num > 0:
        num, remainder = divmod(num, 36)
        chars.append(BASE36_ALPHABET[remainder])

    # Reverse to get most-significant first
    chars.reverse()
    result = "".join(chars)

    # Pad with zeros if needed
    if len(result) < length:
        result = "0" * (length - len(result)) + result

    # Truncate to exact length (keep least significant digits)
    if len(result) > length:
        result = result[len(result) - length:]

    return result


def generate_hash_id(prefix: str, title: str, description: str,
                     created_ns: int, length: int = DEFAULT_ID_LENGTH,
                     nonce: str = "") -> str:
    """Generate a base36 hash-based ID.

    The hash input is ``title|description|created_ns`` with ``|nonce``
    appended when a nonce is given. Same inputs always give the same ID.
    """
    content = f"{title}|{description}|{created_ns}"
    if nonce:
        content += f"|{nonce}"
    hash_bytes = hashlib.sha256(content.encode("utf-8")).digest()

    # 3 bytes carry ~4.6 base36 digits; longer ids need a 4th byte
    num_bytes = 3 if length <= 4 else 4

    short_hash = encode_base36(hash_bytes[:num_bytes], length)
    return f"{prefix}-{short_hash}"
