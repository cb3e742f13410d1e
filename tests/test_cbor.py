import pytest

from dtnbundle.cbor import IndefiniteArray, decode, encode
from dtnbundle.errors import SerializationError

BUNDLE_HEX = (
    "9F88071A00020004008201702F2F6E6F646533312F6D61766C696E6B8201702F2F6E6F6465322F"
    "696E636F6D696E678201702F2F6E6F6465322F696E636F6D696E67821B0000009E9DE3DEFE001A"
    "0036EE80850A020000448218200085010100004443414243FF"
)


def test_encode_uint_shortest_form():
    assert encode(123456789) == bytes.fromhex("1A075BCD15")


def test_encode_nested_array():
    assert encode([123456789, 987654321]) == bytes.fromhex("821A075BCD151A3ADE68B1")


def test_encode_booleans():
    assert encode(True) == b"\xf5"
    assert encode(False) == b"\xf4"


def test_encode_none():
    assert encode(None) == b"\xf6"


def test_decode_canonical_block():
    assert decode(bytes.fromhex("850A0200004482182000")) == [
        10,
        2,
        0,
        0,
        bytes.fromhex("82182000"),
    ]


def test_bundle_round_trip():
    raw = bytes.fromhex(BUNDLE_HEX)
    value = decode(raw)
    assert isinstance(value, IndefiniteArray)
    assert value[0][3] == [1, "//node31/mavlink"]
    assert encode(value) == raw


def test_indefinite_array_framing():
    encoded = encode(IndefiniteArray([1, "a", b"b"]))
    assert encoded[0] == 0x9F
    assert encoded[-1] == 0xFF
    assert decode(encoded) == [1, "a", b"b"]


def test_definite_array_decodes_to_plain_list():
    value = decode(encode([1, 2, 3]))
    assert type(value) is list
    assert value == [1, 2, 3]


@pytest.mark.parametrize(
    "value",
    [
        0,
        23,
        24,
        255,
        256,
        65535,
        65536,
        (1 << 32) - 1,
        1 << 32,
        (1 << 64) - 1,
        -1,
        -(1 << 64),
        "",
        "dtn://node2/incoming",
        b"",
        bytes(range(256)),
        [],
        [[1, [2, [3]]], "x"],
        {"node": 5, "service": 7},
        1.5,
        None,
        True,
    ],
)
def test_round_trip(value):
    assert decode(encode(value)) == value


def test_tuple_encodes_like_list():
    assert encode((1, 2)) == encode([1, 2])


@pytest.mark.parametrize("value", [1 << 64, -(1 << 64) - 1])
def test_encode_rejects_out_of_range_integers(value):
    with pytest.raises(SerializationError):
        encode(value)


def test_encode_rejects_unknown_types():
    with pytest.raises(SerializationError):
        encode(object())


@pytest.mark.parametrize(
    "raw",
    [
        b"",
        bytes.fromhex("1A075B"),
        encode(1) + encode(2),
        b"\xff",
        b"\x1c",
        b"\x9f\x01",
    ],
)
def test_decode_rejects_malformed_input(raw):
    with pytest.raises(SerializationError):
        decode(raw)


def test_decode_rejects_invalid_utf8():
    with pytest.raises(SerializationError):
        decode(b"\x61\xff")


def test_decode_indefinite_byte_string_joins_chunks():
    raw = b"\x5f" + encode(b"ab") + encode(b"cd") + b"\xff"
    assert decode(raw) == b"abcd"