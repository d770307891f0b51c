"""
Unit tests for share-URL generation and parsing.
"""

import base64

import pytest

from channel_url import (
    DEFAULT_BASE_URL,
    NETWORK_LORA,
    build_channel_set_bytes,
    decode_url,
    generate_network_url,
    generate_private_channel_url,
    generate_url,
    network_channel_set,
    parse_url,
)
from channelset import ChannelRole, ChannelSet
from protolite import InvalidEncodingError

pytestmark = pytest.mark.unit


class TestNetworkURL:
    """Tests for the public network link."""

    def test_known_url(self, network_url):
        assert generate_network_url() == network_url

    def test_decodes_to_primary_channel(self, network_url):
        channel_set = decode_url(network_url)
        assert [ch.role for ch in channel_set.channels] == [ChannelRole.PRIMARY]
        assert channel_set.lora.region == 1           # US
        assert channel_set.lora.modem_preset == 3     # MEDIUM_FAST
        assert channel_set.lora.hop_limit <= 7

    def test_custom_base_url(self):
        url = generate_network_url("https://example.net/e/")
        assert url.startswith("https://example.net/e/#")
        assert url.split("#")[1] == generate_network_url().split("#")[1]


class TestGenerateURL:
    """Tests for build_channel_set_bytes / generate_url."""

    def test_deterministic(self, two_channel_set):
        assert build_channel_set_bytes(two_channel_set) == build_channel_set_bytes(two_channel_set)
        assert generate_url(two_channel_set) == generate_url(two_channel_set)

    def test_shape(self, two_channel_set):
        url = generate_url(two_channel_set)
        base, payload = url.split("#")
        assert base == DEFAULT_BASE_URL
        assert payload and not set(payload) & set("+/=")

    def test_round_trip(self, two_channel_set):
        assert decode_url(generate_url(two_channel_set)) == two_channel_set

    def test_network_set_is_fresh_value(self):
        assert network_channel_set() == network_channel_set()


class TestPrivateChannelURL:
    """Tests for generate_private_channel_url."""

    def test_urls_differ(self):
        first = generate_private_channel_url("Test")
        second = generate_private_channel_url("Test")
        assert first.url != second.url
        assert first.psk != second.psk

    def test_psk_is_32_bytes(self):
        result = generate_private_channel_url("Test")
        assert len(base64.b64decode(result.psk)) == 32

    def test_psk_is_standard_base64_with_padding(self):
        # 32 bytes -> 44 characters including one '='
        assert generate_private_channel_url("Test").psk.endswith("=")

    def test_embedded_channel(self):
        result = generate_private_channel_url("Test")
        channel_set = decode_url(result.url)
        (channel,) = channel_set.channels
        assert channel.role is ChannelRole.PRIMARY
        assert channel.settings.name == "Test"
        assert channel.settings.psk == base64.b64decode(result.psk)
        assert channel.settings.uplink_enabled is False
        assert channel.settings.downlink_enabled is False
        assert channel_set.lora == NETWORK_LORA

    def test_default_name(self):
        channel_set = decode_url(generate_private_channel_url().url)
        assert channel_set.channels[0].settings.name == "Private"


class TestParseURL:
    """Tests for parse_url."""

    def test_payload_bytes(self, network_url, network_payload):
        assert parse_url(network_url) == network_payload

    def test_query_before_fragment(self, network_url, network_payload):
        url = network_url.replace("/e/#", "/e/?add=true#")
        assert parse_url(url) == network_payload

    def test_empty_fragment(self):
        assert parse_url(generate_url(ChannelSet())) == b""

    def test_missing_fragment(self):
        with pytest.raises(InvalidEncodingError):
            parse_url("https://meshtastic.org/e/")

    def test_bad_fragment(self):
        with pytest.raises(InvalidEncodingError):
            parse_url("https://meshtastic.org/e/#abc+def")
