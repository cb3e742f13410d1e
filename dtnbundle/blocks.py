"""Canonical blocks and the block types carried inside them."""

import enum
from dataclasses import dataclass
from typing import ClassVar, Union

from . import cbor
from .cbor import IndefiniteArray
from .crc import CRCKind, CRCType
from .endpoint import Endpoint
from .errors import SerializationError
from .flags import BlockFlags

_UINT_LIMIT = 1 << 64


def _uint(obj, field):
    if isinstance(obj, bool) or not isinstance(obj, int) or not 0 <= obj < _UINT_LIMIT:
        raise SerializationError(f"field '{field}' must be an unsigned integer, got {obj!r}")
    return obj


def _freeze_bytes(instance, name):
    value = getattr(instance, name)
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise TypeError(f"{name} must be bytes, got {type(value).__name__}")
    object.__setattr__(instance, name, bytes(value))


class BlockType(enum.IntEnum):
    """Block type codes of the blocks this package understands."""

    PAYLOAD = 1
    PREVIOUS_NODE = 6
    BUNDLE_AGE = 7
    HOP_COUNT = 10


@dataclass(frozen=True)
class PayloadBlock:
    """The application data carried by a bundle."""

    block_type: ClassVar[BlockType] = BlockType.PAYLOAD

    data: bytes

    def __post_init__(self):
        _freeze_bytes(self, "data")

    def __repr__(self):
        return f"PayloadBlock(data_length={len(self.data)})"

    def encode_data(self):
        """The block-type-specific data as it is written into the block."""
        return self.data

    def validate(self):
        return True


@dataclass(frozen=True)
class PreviousNodeBlock:
    """The node that forwarded the bundle, as an encoded endpoint."""

    block_type: ClassVar[BlockType] = BlockType.PREVIOUS_NODE

    data: bytes

    def __post_init__(self):
        _freeze_bytes(self, "data")

    def encode_data(self):
        return self.data

    def validate(self):
        return True

    def to_endpoint(self):
        """Decode the endpoint held in the block data."""
        return Endpoint.from_cbor(cbor.decode(self.data))

    @classmethod
    def from_endpoint(cls, endpoint):
        """Build the block for the given endpoint."""
        return cls(cbor.encode(endpoint.to_cbor()))


@dataclass(frozen=True)
class BundleAgeBlock:
    """The age of the bundle in milliseconds."""

    block_type: ClassVar[BlockType] = BlockType.BUNDLE_AGE

    age: int

    def encode_data(self):
        return cbor.encode(self.age)

    def validate(self):
        return True

    @classmethod
    def from_data(cls, data):
        """Decode the block from its CBOR-encoded data."""
        return cls(_uint(cbor.decode(data), "age"))


@dataclass(frozen=True)
class HopCountBlock:
    """The hop limit of a bundle and the hops taken so far."""

    block_type: ClassVar[BlockType] = BlockType.HOP_COUNT

    limit: int
    count: int

    def encode_data(self):
        return cbor.encode([self.limit, self.count])

    def validate(self):
        return self.limit <= 255

    @classmethod
    def from_data(cls, data):
        """Decode the block from its CBOR-encoded data."""
        obj = cbor.decode(data)
        if not isinstance(obj, list) or isinstance(obj, IndefiniteArray):
            raise SerializationError("hop count block must be a definite-length array")
        if len(obj) != 2:
            raise SerializationError(f"hop count block has 2 elements, got {len(obj)}")
        return cls(_uint(obj[0], "limit"), _uint(obj[1], "count"))


@dataclass(frozen=True)
class UnknownBlock:
    """A block of a type this package does not interpret."""

    block_type: int
    data: bytes

    def __post_init__(self):
        _freeze_bytes(self, "data")

    def encode_data(self):
        return self.data

    def validate(self):
        return True


Block = Union[PayloadBlock, PreviousNodeBlock, BundleAgeBlock, HopCountBlock, UnknownBlock]

_PLAIN_DATA_BLOCKS = {
    BlockType.PAYLOAD: PayloadBlock,
    BlockType.PREVIOUS_NODE: PreviousNodeBlock,
}
_ENCODED_DATA_BLOCKS = {
    BlockType.BUNDLE_AGE: BundleAgeBlock,
    BlockType.HOP_COUNT: HopCountBlock,
}


def _decode_block(type_code, data):
    try:
        known = BlockType(type_code)
    except ValueError:
        return UnknownBlock(type_code, data)
    if known in _PLAIN_DATA_BLOCKS:
        return _PLAIN_DATA_BLOCKS[known](data)
    return _ENCODED_DATA_BLOCKS[known].from_data(data)


@dataclass(frozen=True)
class CanonicalBlock:
    """A non-primary block of a bundle with its number, flags and CRC."""

    block: Block
    block_number: int
    block_flags: BlockFlags = BlockFlags(0)
    crc: CRCType = CRCType()

    def block_type(self):
        """The type code written on the wire for this block."""
        return int(self.block.block_type)

    def to_cbor(self):
        """The block as a CBOR array of 5 or 6 elements."""
        items = [
            self.block_type(),
            self.block_number,
            int(self.block_flags),
            self.crc.to_cbor(),
            self.block.encode_data(),
        ]
        if self.crc.kind is not CRCKind.NONE:
            items.append(self.crc.value_item())
        return items

    @classmethod
    def from_cbor(cls, obj):
        """Decode a canonical block from its CBOR array."""
        if not isinstance(obj, (list, tuple)) or isinstance(obj, IndefiniteArray):
            raise SerializationError("canonical block must know the length of its contents")
        size = len(obj)
        if not 5 <= size <= 6:
            raise SerializationError(f"block has 5 to 6 elements, got {size}")
        type_code = _uint(obj[0], "block_type")
        block_number = _uint(obj[1], "block_number")
        block_flags = BlockFlags.from_bits_truncate(_uint(obj[2], "block_flags"))
        crc = CRCType.from_cbor(obj[3])
        data = obj[4]
        if not isinstance(data, (bytes, bytearray)):
            raise SerializationError("field 'data' must be a byte string")
        block = _decode_block(type_code, bytes(data))
        if size == 6:
            try:
                crc = crc.with_value(obj[5])
            except ValueError as exc:
                raise SerializationError(str(exc)) from exc
        return cls(block, block_number, block_flags, crc)

    def validate(self):
        """Canonical blocks are currently always accepted."""
        return True