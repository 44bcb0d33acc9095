"""
Protocol buffers wire format, the subset used by cosmos-sdk transactions

https://protobuf.dev/programming-guides/encoding/

Only varint (0) and length-delimited (2) wire types occur in the cosmos tx
messages. Encoders follow proto3 rules: scalar fields holding their default
value (0, "", b"") are omitted; callers emit fields in field number order.
"""
import typing

WIRE_VARINT = 0
WIRE_I64 = 1
WIRE_LEN = 2
WIRE_I32 = 5

UINT64_MAX = 0xFFFFFFFFFFFFFFFF


def varint(integer: int) -> bytes:
    """
    Base 128 varint, least significant group first

    >>> varint(300).hex()
    'ac02'
    """
    if integer < 0:
        raise ValueError("signed integer")
    if integer > UINT64_MAX:
        raise ValueError("integer exceeds uint64")
    encoded = b""
    while True:
        group = integer & 0x7F
        integer >>= 7
        if integer:
            encoded += (group | 0x80).to_bytes(1, "big")
        else:
            encoded += group.to_bytes(1, "big")
            return encoded


def parse_varint(payload: bytes) -> typing.Tuple[int, bytes]:
    """
    Parse varint at the beginning of payload, returning the integer and the
    remaining unparsed payload

    >>> parse_varint(bytes.fromhex("ac02ff"))
    (300, b'\\xff')
    """
    integer = 0
    for idx, byte in enumerate(payload[:10]):
        integer |= (byte & 0x7F) << (7 * idx)
        if not byte & 0x80:
            return integer, payload[idx + 1 :]
    raise ValueError("truncated or overlong varint")


def field_key(field_number: int, wire_type: int) -> bytes:
    return varint(field_number << 3 | wire_type)


def uint64_field(field_number: int, value: int) -> bytes:
    if not value:
        return b""
    return field_key(field_number, WIRE_VARINT) + varint(value)


def bytes_field(field_number: int, value: bytes) -> bytes:
    if not value:
        return b""
    return field_key(field_number, WIRE_LEN) + varint(len(value)) + value


def string_field(field_number: int, value: str) -> bytes:
    return bytes_field(field_number, value.encode("utf-8"))


def message_field(field_number: int, message: bytes) -> bytes:
    """
    Embedded message field. Set submessages are emitted even when empty
    """
    return field_key(field_number, WIRE_LEN) + varint(len(message)) + message


def repeated_message_field(field_number: int, messages: typing.Iterable[bytes]) -> bytes:
    return b"".join(message_field(field_number, message) for message in messages)


def repeated_bytes_field(field_number: int, values: typing.Iterable[bytes]) -> bytes:
    """
    Repeated bytes are written element by element, empty elements included
    """
    return b"".join(
        field_key(field_number, WIRE_LEN) + varint(len(value)) + value
        for value in values
    )


def parse_fields(
    payload: bytes,
) -> typing.List[typing.Tuple[int, int, typing.Union[int, bytes]]]:
    """
    Parse a message into a list of (field number, wire type, value)

    varint values are returned as int, length-delimited values as bytes
    """
    fields = []
    while payload:
        key, payload = parse_varint(payload)
        field_number, wire_type = key >> 3, key & 0x7
        if field_number == 0:
            raise ValueError("invalid field number 0")
        if wire_type == WIRE_VARINT:
            value, payload = parse_varint(payload)
        elif wire_type == WIRE_LEN:
            length, payload = parse_varint(payload)
            if length > len(payload):
                raise ValueError(f"truncated field {field_number}")
            value, payload = payload[:length], payload[length:]
        elif wire_type == WIRE_I64:
            if len(payload) < 8:
                raise ValueError(f"truncated field {field_number}")
            value, payload = int.from_bytes(payload[:8], "little"), payload[8:]
        elif wire_type == WIRE_I32:
            if len(payload) < 4:
                raise ValueError(f"truncated field {field_number}")
            value, payload = int.from_bytes(payload[:4], "little"), payload[4:]
        else:
            raise ValueError(f"unsupported wire type {wire_type}")
        fields.append((field_number, wire_type, value))
    return fields


def fields_dict(payload: bytes) -> typing.Dict[int, list]:
    """
    Group parsed field values by field number, preserving order
    """
    grouped = {}
    for field_number, _, value in parse_fields(payload):
        grouped.setdefault(field_number, []).append(value)
    return grouped
