"""
Shared fixtures for the share-URL test suite.
"""

import pytest

from channelset import Channel, ChannelRole, ChannelSet, ChannelSettings, RadioConfig

# Network defaults as a Meshtastic app shares them; hand-assembled from the
# field table (27 bytes, so no base64 padding to strip).
NETWORK_PAYLOAD_HEX = (
    "0a0d"                      # ChannelSet.channels, 13 bytes
    "0800"                      #   Channel.index = 0
    "1207"                      #   Channel.settings, 7 bytes
    "120101"                    #     psk = 01
    "2801"                      #     uplink_enabled
    "3001"                      #     downlink_enabled
    "1801"                      #   Channel.role = PRIMARY
    "120a"                      # ChannelSet.lora_config, 10 bytes
    "1801" "2003" "3806" "5801" "601e"
)


@pytest.fixture
def network_payload():
    return bytes.fromhex(NETWORK_PAYLOAD_HEX)


@pytest.fixture
def network_url():
    return "https://meshtastic.org/e/#Cg0IABIHEgEBKAEwARgBEgoYASADOAZYAWAe"


@pytest.fixture
def two_channel_set():
    return ChannelSet(
        channels=(
            Channel(index=0, role=ChannelRole.PRIMARY,
                    settings=ChannelSettings(psk=b"\x01", uplink_enabled=True)),
            Channel(index=1, role=ChannelRole.SECONDARY,
                    settings=ChannelSettings(name="Ops", psk=bytes(range(16)),
                                             channel_num=2, downlink_enabled=False)),
        ),
        lora=RadioConfig(region=3, modem_preset=0, hop_limit=3, tx_enabled=False, tx_power=27),
    )
