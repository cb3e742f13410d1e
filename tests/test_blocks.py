import pytest

from dtnbundle import cbor
from dtnbundle.blocks import (
    BlockType,
    BundleAgeBlock,
    CanonicalBlock,
    HopCountBlock,
    PayloadBlock,
    PreviousNodeBlock,
    UnknownBlock,
)
from dtnbundle.crc import CRCKind, CRCType
from dtnbundle.endpoint import DTNEndpoint, Endpoint, IPNEndpoint
from dtnbundle.errors import SerializationError
from dtnbundle.flags import BlockFlags

HOP_COUNT_WIRE = bytes.fromhex("850A0200004482182000")
PAYLOAD_WIRE = bytes.fromhex("85010100004443414243")


def _roundtrip(block):
    return CanonicalBlock.from_cbor(cbor.decode(cbor.encode(block.to_cbor())))


def test_hop_count_block_wire_bytes():
    block = CanonicalBlock(HopCountBlock(limit=32, count=0), 2, BlockFlags(0), CRCType.none())
    assert cbor.encode(block.to_cbor()) == HOP_COUNT_WIRE


def test_hop_count_block_decodes():
    block = CanonicalBlock.from_cbor(cbor.decode(HOP_COUNT_WIRE))
    assert block == CanonicalBlock(HopCountBlock(32, 0), 2, BlockFlags(0), CRCType.none())
    assert block.block_type() == BlockType.HOP_COUNT


def test_payload_block_wire_bytes():
    block = CanonicalBlock(PayloadBlock(bytes([67, 65, 66, 67])), 1)
    assert cbor.encode(block.to_cbor()) == PAYLOAD_WIRE


def test_payload_block_decodes():
    block = CanonicalBlock.from_cbor(cbor.decode(PAYLOAD_WIRE))
    assert block.block == PayloadBlock(b"CABC")
    assert block.block_number == 1
    assert block.block_type() == 1


@pytest.mark.parametrize(
    "crc",
    [CRCType.crc16(b"\x55\xaa"), CRCType.crc32(b"\x55\xaa\x55\xaa")],
)
def test_roundtrip_with_crc(crc):
    block = CanonicalBlock(PayloadBlock(b"hello"), 1, BlockFlags(0), crc)
    items = block.to_cbor()
    assert len(items) == 6
    assert items[5] == crc.value
    assert _roundtrip(block) == block


def test_unknown_block_roundtrip():
    block = CanonicalBlock(UnknownBlock(192, b"\x01\x02"), 5)
    decoded = _roundtrip(block)
    assert decoded == block
    assert decoded.block_type() == 192


def test_bundle_age_block_roundtrip():
    block = CanonicalBlock(BundleAgeBlock(123456789), 3)
    decoded = _roundtrip(block)
    assert decoded.block == BundleAgeBlock(123456789)
    assert decoded.block_type() == BlockType.BUNDLE_AGE


def test_bundle_age_from_data():
    assert BundleAgeBlock.from_data(cbor.encode(500)) == BundleAgeBlock(500)
    with pytest.raises(SerializationError):
        BundleAgeBlock.from_data(cbor.encode("old"))


def test_hop_count_from_data_rejects_wrong_length():
    with pytest.raises(SerializationError):
        HopCountBlock.from_data(cbor.encode([1, 2, 3]))
    with pytest.raises(SerializationError):
        HopCountBlock.from_data(cbor.encode(cbor.IndefiniteArray([1, 2])))


def test_hop_count_validate():
    assert HopCountBlock(255, 0).validate() is True
    assert HopCountBlock(256, 0).validate() is False


def test_previous_node_block_endpoint_roundtrip():
    endpoints = (Endpoint.parse("dtn://node2/incoming"), IPNEndpoint(7, 3), DTNEndpoint("none"))
    for endpoint in endpoints:
        block = PreviousNodeBlock.from_endpoint(endpoint)
        assert block.to_endpoint() == endpoint
        assert _roundtrip(CanonicalBlock(block, 4)).block.to_endpoint() == endpoint


def test_block_flags_are_truncated():
    items = CanonicalBlock(PayloadBlock(b"x"), 1).to_cbor()
    items[2] = 0xFF
    decoded = CanonicalBlock.from_cbor(items)
    assert decoded.block_flags == (
        BlockFlags.MUST_REPLICATE_TO_ALL_FRAGMENTS
        | BlockFlags.STATUS_REPORT_REQUESTED_WHEN_NOT_PROCESSABLE
        | BlockFlags.DELETE_BUNDLE_WHEN_NOT_PROCESSABLE
        | BlockFlags.DELETE_BLOCK_WHEN_NOT_PROCESSABLE
    )


@pytest.mark.parametrize("size", [4, 7])
def test_wrong_number_of_elements(size):
    items = [1, 1, 0, 0, b"x", b"", b""][:size]
    with pytest.raises(SerializationError):
        CanonicalBlock.from_cbor(items)


def test_indefinite_array_rejected():
    with pytest.raises(SerializationError):
        CanonicalBlock.from_cbor(cbor.IndefiniteArray([1, 1, 0, 0, b"x"]))


def test_data_must_be_bytes():
    with pytest.raises(SerializationError):
        CanonicalBlock.from_cbor([1, 1, 0, 0, "text"])


def test_crc_value_without_crc_type_rejected():
    with pytest.raises(SerializationError):
        CanonicalBlock.from_cbor([1, 1, 0, 0, b"x", b"\x00\x00"])


def test_crc_value_of_wrong_size_rejected():
    with pytest.raises(SerializationError):
        CanonicalBlock.from_cbor([1, 1, 0, 1, b"x", b"\x00\x00\x00"])


def test_crc_type_without_value_keeps_zero_bytes():
    decoded = CanonicalBlock.from_cbor([1, 1, 0, 2, b"x"])
    assert decoded.crc.kind is CRCKind.CRC32
    assert decoded.crc.value == bytes(4)


def test_invalid_hop_count_data_rejected():
    with pytest.raises(SerializationError):
        CanonicalBlock.from_cbor([10, 2, 0, 0, b"\xff"])


def test_payload_repr_shows_length():
    assert repr(PayloadBlock(b"abcd")) == "PayloadBlock(data_length=4)"


def test_canonical_block_validates():
    assert CanonicalBlock(HopCountBlock(300, 0), 2).validate() is True