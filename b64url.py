"""URL-safe, unpadded base64 for share-URL fragments and QR codes."""

import base64
import binascii
import re

from protolite import InvalidEncodingError

_ALPHABET = re.compile(r"[A-Za-z0-9_-]*")


def to_base64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(bytes(data)).decode("ascii").rstrip("=")


def from_base64url(text: str) -> bytes:
    """Inverse of :func:`to_base64url`; padding is re-derived from the length."""
    if not _ALPHABET.fullmatch(text):
        bad = sorted(set(re.sub(r"[A-Za-z0-9_-]", "", text)))
        raise InvalidEncodingError(f"invalid base64url character(s): {''.join(bad)!r}")
    if len(text) % 4 == 1:
        raise InvalidEncodingError(f"impossible base64url length {len(text)}")
    padded = text + "=" * (-len(text) % 4)
    try:
        return base64.urlsafe_b64decode(padded)
    except binascii.Error as exc:
        raise InvalidEncodingError(f"undecodable base64url: {exc}") from None
