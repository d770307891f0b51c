"""
channel_url.py  –  ChannelSet  ⇄  https://meshtastic.org/e/#<payload>

The fragment is never sent to a server; a scanning app decodes it locally.
Everything here is pure: build bytes, frame them, glue on the base URL.
"""

import logging
from typing import NamedTuple, Optional

from b64url import from_base64url, to_base64url
from channelset import (
    Channel,
    ChannelRole,
    ChannelSet,
    ChannelSettings,
    RadioConfig,
    build_channel_set,
    parse_channel_set,
)
from keymaterial import generate_psk, psk_to_base64
from protolite import InvalidEncodingError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://meshtastic.org/e/"
DEFAULT_PRIVATE_NAME = "Private"
DEFAULT_PSK = b"\x01"           # "AQ==", the well-known public key

REGION_US = 1
MODEM_PRESET_MEDIUM_FAST = 3

# ─────────────────────────────────────────────────────────────────────────────
# Network policy: every device joining the public mesh gets exactly this.
NETWORK_LORA = RadioConfig(
    region=REGION_US,
    modem_preset=MODEM_PRESET_MEDIUM_FAST,
    hop_limit=6,
    tx_enabled=True,
    tx_power=30,                # US maximum, dBm
)

NETWORK_CHANNEL = Channel(
    index=0,
    settings=ChannelSettings(
        name="",                # blank = primary, by convention
        psk=DEFAULT_PSK,
        uplink_enabled=True,
        downlink_enabled=True,
    ),
    role=ChannelRole.PRIMARY,
)


class PrivateChannel(NamedTuple):
    url: str
    psk: str                    # standard base64 of the raw key, for backup


# ─────────────────────────────────────────────────────────────────────────────
def build_channel_set_bytes(config: ChannelSet) -> bytes:
    payload = build_channel_set(config)
    logger.debug("ChannelSet: %d channel(s), lora=%s, %d bytes",
                 len(config.channels), config.lora is not None, len(payload))
    return payload


def generate_url(config: ChannelSet, base_url: str = DEFAULT_BASE_URL) -> str:
    return f"{base_url}#{to_base64url(build_channel_set_bytes(config))}"


def network_channel_set() -> ChannelSet:
    return ChannelSet(channels=(NETWORK_CHANNEL,), lora=NETWORK_LORA)


def generate_network_url(base_url: str = DEFAULT_BASE_URL) -> str:
    return generate_url(network_channel_set(), base_url)


def generate_private_channel_url(name: Optional[str] = None,
                                 base_url: str = DEFAULT_BASE_URL) -> PrivateChannel:
    """
    Single primary channel with a fresh AES-256 key.

    Uplink/downlink are off so the channel never bridges to MQTT.  The key is
    also inside the URL: whoever holds the link holds the key.
    """
    psk = generate_psk(256)
    config = ChannelSet(
        channels=(Channel(
            index=0,
            settings=ChannelSettings(
                name=name or DEFAULT_PRIVATE_NAME,
                psk=psk,
                uplink_enabled=False,
                downlink_enabled=False,
            ),
            role=ChannelRole.PRIMARY,
        ),),
        lora=NETWORK_LORA,
    )
    return PrivateChannel(url=generate_url(config, base_url), psk=psk_to_base64(psk))


# ─────────────────────────────────────────────────────────────────────────────
def parse_url(url: str) -> bytes:
    """Payload bytes of a share URL (everything after the last ``#``)."""
    if "#" not in url:
        raise InvalidEncodingError("URL has no #fragment payload")
    return from_base64url(url.rsplit("#", 1)[1].strip())


def decode_url(url: str) -> ChannelSet:
    return parse_channel_set(parse_url(url))
