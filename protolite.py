"""
protolite.py  –  just enough of the protobuf wire format for ChannelSet

Varints, tags, length-delimited fields and a generic field iterator.
No descriptors, no reflection: the message tables live in channelset.py.
"""

from typing import Iterator, Tuple

WIRE_TYPE_VARINT = 0
WIRE_TYPE_FIXED64 = 1           # decode-only (skipping unknown fields)
WIRE_TYPE_LENGTH_DELIMITED = 2
WIRE_TYPE_FIXED32 = 5           # decode-only (skipping unknown fields)

MAX_VARINT = (1 << 64) - 1
MAX_VARINT_BYTES = 10
MAX_FIELD_NUMBER = (1 << 29) - 1


# ─────────────────────────────────────────────────────────────────────────────
class ProtoError(ValueError):
    """Base class for every encode/decode failure in this package."""


class MalformedInputError(ProtoError):
    """Caller handed us a value the protocol cannot carry."""


class DecodeError(ProtoError):
    def __init__(self, reason: str, position: int):
        super().__init__(f"{reason} (at byte {position})")
        self.reason = reason
        self.position = position


class TruncatedDataError(DecodeError):
    pass


class InvalidEncodingError(ProtoError):
    """Text framing (base64url / URL) is not a valid payload."""


# ─────────────────────────────────────────────────────────────────────────────
def encode_varint(value: int) -> bytes:
    """Unsigned LEB128, low group first, MSB = continuation."""
    if isinstance(value, bool):
        value = int(value)
    if not isinstance(value, int):
        raise TypeError(f"varint value must be int, not {type(value).__name__}")
    if value < 0:
        raise MalformedInputError(f"cannot encode negative value {value} as varint")
    if value > MAX_VARINT:
        raise MalformedInputError(f"value {value} does not fit in 64 bits")

    out = bytearray()
    while value > 0x7F:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def decode_varint(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """Return ``(value, bytes_consumed)`` for the varint at *offset*."""
    value = 0
    shift = 0
    pos = offset
    while True:
        if pos >= len(data):
            raise TruncatedDataError("truncated varint", pos)
        if pos - offset >= MAX_VARINT_BYTES:
            raise DecodeError("varint longer than 10 bytes", offset)
        byte = data[pos]
        value |= (byte & 0x7F) << shift
        pos += 1
        if not byte & 0x80:
            break
        shift += 7
    if value > MAX_VARINT:
        raise DecodeError("varint overflows 64 bits", offset)
    return value, pos - offset


# ─────────────────────────────────────────────────────────────────────────────
def encode_tag(field_number: int, wire_type: int) -> bytes:
    if not 1 <= field_number <= MAX_FIELD_NUMBER:
        raise MalformedInputError(f"invalid field number {field_number}")
    return encode_varint((field_number << 3) | wire_type)


def encode_varint_field(field_number: int, value: int) -> bytes:
    return encode_tag(field_number, WIRE_TYPE_VARINT) + encode_varint(value)


def encode_bool_field(field_number: int, value: bool) -> bytes:
    return encode_varint_field(field_number, 1 if value else 0)


def encode_length_delimited_field(field_number: int, payload: bytes) -> bytes:
    """Tag, length, payload.  Strings, raw bytes and submessages all go here."""
    payload = bytes(payload)
    return (encode_tag(field_number, WIRE_TYPE_LENGTH_DELIMITED)
            + encode_varint(len(payload)) + payload)


def encode_string_field(field_number: int, value: str) -> bytes:
    return encode_length_delimited_field(field_number, value.encode("utf-8"))


# ─────────────────────────────────────────────────────────────────────────────
def _read_varint(data: bytes, pos: int, base: int) -> Tuple[int, int]:
    try:
        return decode_varint(data, pos)
    except DecodeError as exc:
        raise type(exc)(exc.reason, exc.position + base) from None


def iter_fields(data: bytes, base: int = 0) -> Iterator[Tuple[int, int, object, int, int]]:
    """
    Walk a serialized message and yield
    ``(field_number, wire_type, value, tag_offset, value_offset)``.

    VARINT values come back as int, LENGTH_DELIMITED as bytes, FIXED32 and
    FIXED64 as little-endian ints.  Groups (wire types 3/4) are not supported.
    *base* is where *data* starts inside the enclosing payload, so offsets
    (yielded and in errors) are relative to the outermost message.
    """
    data = bytes(data)
    pos = 0
    end = len(data)
    while pos < end:
        tag_pos = pos
        tag, used = _read_varint(data, pos, base)
        pos += used
        field_number, wire_type = tag >> 3, tag & 0x07
        if field_number == 0:
            raise DecodeError("field number 0 is reserved", base + tag_pos)

        if wire_type == WIRE_TYPE_VARINT:
            value_pos = pos
            value, used = _read_varint(data, pos, base)
            pos += used
        elif wire_type == WIRE_TYPE_LENGTH_DELIMITED:
            length, used = _read_varint(data, pos, base)
            pos += used
            if pos + length > end:
                raise TruncatedDataError(
                    f"field {field_number} declares {length} bytes, "
                    f"{end - pos} remain", base + pos)
            value_pos = pos
            value = data[pos:pos + length]
            pos += length
        elif wire_type in (WIRE_TYPE_FIXED32, WIRE_TYPE_FIXED64):
            width = 4 if wire_type == WIRE_TYPE_FIXED32 else 8
            if pos + width > end:
                raise TruncatedDataError(f"truncated fixed{width * 8} field", base + pos)
            value_pos = pos
            value = int.from_bytes(data[pos:pos + width], "little")
            pos += width
        else:
            raise DecodeError(f"unsupported wire type {wire_type}", base + tag_pos)

        yield field_number, wire_type, value, base + tag_pos, base + value_pos
