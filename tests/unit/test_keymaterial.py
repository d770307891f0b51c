"""
Unit tests for pre-shared key generation and base64 helpers.
"""

import pytest

from keymaterial import generate_psk, psk_from_base64, psk_to_base64
from protolite import InvalidEncodingError, MalformedInputError

pytestmark = pytest.mark.unit


class TestGeneratePSK:
    """Tests for generate_psk."""

    def test_default_is_256_bits(self):
        assert len(generate_psk()) == 32

    def test_128_bits(self):
        assert len(generate_psk(128)) == 16

    def test_keys_differ(self):
        assert generate_psk() != generate_psk()

    @pytest.mark.parametrize("bits", [0, -8, 12, 255])
    def test_rejects_bad_sizes(self, bits):
        with pytest.raises(MalformedInputError):
            generate_psk(bits)


class TestPSKBase64:
    """Tests for the standard-alphabet PSK helpers."""

    def test_default_key(self):
        assert psk_to_base64(b"\x01") == "AQ=="
        assert psk_from_base64("AQ==") == b"\x01"

    def test_round_trip(self):
        key = generate_psk()
        assert psk_from_base64(psk_to_base64(key)) == key

    def test_rejects_garbage(self):
        with pytest.raises(InvalidEncodingError):
            psk_from_base64("not base64!")
