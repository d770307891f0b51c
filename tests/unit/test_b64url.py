"""
Unit tests for the unpadded URL-safe base64 framing.
"""

import os

import pytest

from b64url import from_base64url, to_base64url
from protolite import InvalidEncodingError

pytestmark = pytest.mark.unit


class TestToBase64URL:
    """Tests for to_base64url."""

    def test_empty(self):
        assert to_base64url(b"") == ""

    def test_substitutes_and_strips_padding(self):
        # standard base64 of fb ff is "+/8="
        assert to_base64url(b"\xfb\xff") == "-_8"

    def test_never_emits_reserved_characters(self):
        for length in range(0, 65):
            text = to_base64url(os.urandom(length))
            assert not set(text) & set("+/=")

    def test_known_payload(self, network_payload):
        assert to_base64url(network_payload) == "Cg0IABIHEgEBKAEwARgBEgoYASADOAZYAWAe"


class TestFromBase64URL:
    """Tests for from_base64url."""

    def test_round_trip(self):
        for length in range(0, 65):
            data = os.urandom(length)
            assert from_base64url(to_base64url(data)) == data

    def test_reinstates_padding(self):
        assert from_base64url("-_8") == b"\xfb\xff"
        assert from_base64url("AQ") == b"\x01"

    @pytest.mark.parametrize("text", ["ab+c", "ab/c", "AQ==", "abc!", "ab c"])
    def test_rejects_characters_outside_alphabet(self, text):
        with pytest.raises(InvalidEncodingError):
            from_base64url(text)

    @pytest.mark.parametrize("text", ["A", "abcde", "abcdefghi"])
    def test_rejects_impossible_length(self, text):
        with pytest.raises(InvalidEncodingError):
            from_base64url(text)
