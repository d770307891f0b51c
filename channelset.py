"""
channelset.py  –  Meshtastic ChannelSet / Channel / ChannelSettings / LoRaConfig

Immutable value types plus one field table per message.  The tables are the
whole wire contract: a single generic loop encodes every message from them,
and the same tables decode it again.  Field numbers must match the
Meshtastic protobufs exactly; a wrong number still parses on the radio, just
as the wrong field.
"""

import enum
import logging
from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple

import protolite
from protolite import DecodeError, MalformedInputError

logger = logging.getLogger(__name__)

UINT32_MAX = 0xFFFFFFFF
MAX_HOP_LIMIT = 7
MAX_CHANNEL_INDEX = 7
PSK_LENGTHS = (0, 1, 16, 32)    # none / default-key index / AES128 / AES256


class ChannelRole(enum.IntEnum):
    DISABLED = 0
    PRIMARY = 1
    SECONDARY = 2


# ─────────────────────────────────────────────────────────────────────────────
# validation helpers (fail fast, never clamp)

def _check_uint(name, value, maximum=UINT32_MAX):
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedInputError(f"{name} must be an integer, got {value!r}")
    if not 0 <= value <= maximum:
        raise MalformedInputError(f"{name}={value} outside 0..{maximum}")


def _check_bool(name, value):
    if value is not None and not isinstance(value, bool):
        raise MalformedInputError(f"{name} must be true/false, got {value!r}")


# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class ChannelSettings:
    channel_num: Optional[int] = None
    psk: Optional[bytes] = None
    name: Optional[str] = None
    uplink_enabled: Optional[bool] = None
    downlink_enabled: Optional[bool] = None

    def __post_init__(self):
        _check_uint("channel_num", self.channel_num)
        if self.psk is not None:
            if not isinstance(self.psk, (bytes, bytearray, memoryview)):
                raise MalformedInputError(f"psk must be bytes, got {type(self.psk).__name__}")
            psk = bytes(self.psk)
            if len(psk) not in PSK_LENGTHS:
                raise MalformedInputError(
                    f"psk must be 0, 1, 16 or 32 bytes, got {len(psk)}")
            object.__setattr__(self, "psk", psk)
        if self.name is not None and not isinstance(self.name, str):
            raise MalformedInputError(f"name must be a string, got {self.name!r}")
        _check_bool("uplink_enabled", self.uplink_enabled)
        _check_bool("downlink_enabled", self.downlink_enabled)


@dataclass(frozen=True)
class Channel:
    index: Optional[int] = None
    settings: Optional[ChannelSettings] = None
    role: Optional[ChannelRole] = None

    def __post_init__(self):
        _check_uint("index", self.index, MAX_CHANNEL_INDEX)
        if self.settings is not None and not isinstance(self.settings, ChannelSettings):
            raise MalformedInputError("settings must be a ChannelSettings")
        if self.role is not None:
            if isinstance(self.role, bool) or not isinstance(self.role, int):
                raise MalformedInputError(f"role must be a ChannelRole, got {self.role!r}")
            try:
                object.__setattr__(self, "role", ChannelRole(self.role))
            except ValueError:
                raise MalformedInputError(f"unknown channel role {self.role}") from None


@dataclass(frozen=True)
class RadioConfig:
    """The LoRaConfig subset carried in a share URL."""

    region: Optional[int] = None
    modem_preset: Optional[int] = None
    hop_limit: Optional[int] = None
    tx_enabled: Optional[bool] = None
    tx_power: Optional[int] = None

    def __post_init__(self):
        _check_uint("region", self.region)
        _check_uint("modem_preset", self.modem_preset)
        _check_uint("hop_limit", self.hop_limit, MAX_HOP_LIMIT)
        _check_bool("tx_enabled", self.tx_enabled)
        _check_uint("tx_power", self.tx_power)


@dataclass(frozen=True)
class ChannelSet:
    channels: Tuple[Channel, ...] = ()
    lora: Optional[RadioConfig] = None

    def __post_init__(self):
        channels = tuple(self.channels)
        for ch in channels:
            if not isinstance(ch, Channel):
                raise MalformedInputError(f"channels must hold Channel values, got {ch!r}")
        object.__setattr__(self, "channels", channels)
        if self.lora is not None and not isinstance(self.lora, RadioConfig):
            raise MalformedInputError("lora must be a RadioConfig")


# ─────────────────────────────────────────────────────────────────────────────
# field tables

class FieldSpec(NamedTuple):
    number: int
    attr: str
    kind: str                       # uint | bool | bytes | string | message
    message: Optional[type] = None
    repeated: bool = False
    skip_default: bool = False      # omit 0 / "" even when explicitly set


SCHEMA = {
    ChannelSettings: (
        FieldSpec(1, "channel_num", "uint", skip_default=True),
        FieldSpec(2, "psk", "bytes"),
        FieldSpec(3, "name", "string", skip_default=True),
        FieldSpec(5, "uplink_enabled", "bool"),
        FieldSpec(6, "downlink_enabled", "bool"),
    ),
    Channel: (
        FieldSpec(1, "index", "uint"),
        FieldSpec(2, "settings", "message", ChannelSettings),
        FieldSpec(3, "role", "uint"),
    ),
    RadioConfig: (
        FieldSpec(3, "region", "uint"),
        FieldSpec(4, "modem_preset", "uint"),
        FieldSpec(7, "hop_limit", "uint"),
        FieldSpec(11, "tx_enabled", "bool"),
        FieldSpec(12, "tx_power", "uint"),
    ),
    ChannelSet: (
        FieldSpec(1, "channels", "message", Channel, repeated=True),
        FieldSpec(2, "lora", "message", RadioConfig),
    ),
}

_VARINT_KINDS = ("uint", "bool")


def _schema_for(cls):
    try:
        return SCHEMA[cls]
    except KeyError:
        raise TypeError(f"no wire schema for {cls.__name__}") from None


# ─────────────────────────────────────────────────────────────────────────────
def _encode_one(spec: FieldSpec, value) -> bytes:
    if spec.kind == "uint":
        return protolite.encode_varint_field(spec.number, int(value))
    if spec.kind == "bool":
        return protolite.encode_bool_field(spec.number, value)
    if spec.kind == "bytes":
        return protolite.encode_length_delimited_field(spec.number, value)
    if spec.kind == "string":
        return protolite.encode_string_field(spec.number, value)
    return protolite.encode_length_delimited_field(spec.number, encode_message(value))


def encode_message(msg) -> bytes:
    """Serialize any of the four message types, fields in ascending order."""
    parts = []
    for spec in _schema_for(type(msg)):
        value = getattr(msg, spec.attr)
        if value is None or (spec.skip_default and not value):
            continue
        for item in (value if spec.repeated else (value,)):
            parts.append(_encode_one(spec, item))
    return b"".join(parts)


def build_channel_settings(settings: ChannelSettings) -> bytes:
    return encode_message(settings)


def build_channel(channel: Channel) -> bytes:
    return encode_message(channel)


def build_lora_config(lora: RadioConfig) -> bytes:
    return encode_message(lora)


def build_channel_set(channel_set: ChannelSet) -> bytes:
    return encode_message(channel_set)


# ─────────────────────────────────────────────────────────────────────────────
def _decode_one(spec: FieldSpec, raw, value_pos: int, owner: str):
    if spec.kind == "uint":
        return raw
    if spec.kind == "bool":
        return raw != 0
    if spec.kind == "bytes":
        return raw
    if spec.kind == "string":
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"{owner}.{spec.attr} is not valid UTF-8",
                              value_pos + exc.start) from None
    return decode_message(raw, spec.message, value_pos)


def decode_message(data: bytes, cls, base: int = 0):
    """
    Parse *data* as message *cls*.

    *base* is the offset of *data* inside the outermost payload; error
    positions are reported against that payload.

    Unknown fields are skipped.  A non-repeated field seen twice keeps the
    last value, repeated fields keep wire order.
    """
    by_number = {spec.number: spec for spec in _schema_for(cls)}
    values = {}
    for number, wire_type, raw, tag_pos, value_pos in protolite.iter_fields(data, base):
        spec = by_number.get(number)
        if spec is None:
            logger.debug("%s: skipping unknown field %d (wire type %d)",
                         cls.__name__, number, wire_type)
            continue
        expected = (protolite.WIRE_TYPE_VARINT if spec.kind in _VARINT_KINDS
                    else protolite.WIRE_TYPE_LENGTH_DELIMITED)
        if wire_type != expected:
            raise DecodeError(
                f"{cls.__name__}.{spec.attr}: wire type {wire_type}, expected {expected}",
                tag_pos)
        value = _decode_one(spec, raw, value_pos, cls.__name__)
        if spec.repeated:
            values.setdefault(spec.attr, []).append(value)
        else:
            values[spec.attr] = value
    return cls(**values)


def parse_channel_set(data: bytes) -> ChannelSet:
    return decode_message(data, ChannelSet)
