"""Keyed invite codes for private bets.

    code = encode(HMAC-SHA256(secret, f"{bet_id}:{salt}"))[:length]

The code is never stored: it is re-derived from the bet id and the bet's
rotation counter (invite_salt). Bumping the salt invalidates every previously
issued code for that bet.

Encoding: 5 bits per character, most significant first, over a 32-symbol
alphabet without the easily confused 0/O and 1/I.
"""

import hashlib
import hmac

ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
_BITS_PER_CHAR = 5
_MAX_LENGTH = (hashlib.sha256().digest_size * 8) // _BITS_PER_CHAR


def derive_code(bet_id: str, salt: int, secret: str, length: int = 8) -> str:
    if not secret:
        raise ValueError("invite secret must not be empty")
    if not (1 <= length <= _MAX_LENGTH):
        raise ValueError(f"invite code length must be 1..{_MAX_LENGTH}, got {length}")
    digest = hmac.new(
        secret.encode(), f"{bet_id}:{salt}".encode(), hashlib.sha256
    ).digest()
    value = int.from_bytes(digest, "big")
    total_bits = len(digest) * 8
    chars = []
    for i in range(length):
        shift = total_bits - _BITS_PER_CHAR * (i + 1)
        chars.append(ALPHABET[(value >> shift) & 0x1F])
    return "".join(chars)


def normalize_code(supplied: str) -> str:
    """Users type codes by hand: ignore surrounding whitespace and case."""
    return supplied.strip().upper()


def codes_match(expected: str, supplied: str) -> bool:
    """Constant-time comparison of the derived code and user input."""
    return hmac.compare_digest(expected.encode(), normalize_code(supplied).encode())
