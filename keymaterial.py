"""Pre-shared channel keys."""

import base64
import binascii
import secrets

from protolite import InvalidEncodingError, MalformedInputError


def generate_psk(bits: int = 256) -> bytes:
    """Fresh key from the OS CSPRNG.  256 bits = AES-256 channel key."""
    if isinstance(bits, bool) or not isinstance(bits, int) or bits <= 0 or bits % 8:
        raise MalformedInputError(f"key size must be a positive multiple of 8 bits, got {bits!r}")
    return secrets.token_bytes(bits // 8)


def psk_to_base64(psk: bytes) -> str:
    return base64.b64encode(bytes(psk)).decode("ascii")


def psk_from_base64(text: str) -> bytes:
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidEncodingError(f"psk is not valid base64: {exc}") from None
