"""Bundles: encoding, decoding, fragmentation and reassembly."""

from dataclasses import dataclass, replace

from . import cbor
from .blocks import CanonicalBlock, PayloadBlock
from .cbor import IndefiniteArray
from .errors import (
    BundleInvalidError,
    FragmentTooSmallError,
    MustNotFragmentError,
    SerializationError,
)
from .flags import BlockFlags, BundleFlags
from .primaryblock import PrimaryBlock

# Start and end marker of the indefinite-length array around the bundle.
BUNDLE_SERIALIZATION_OVERHEAD = 2
# A payload block with the largest possible field values and a CRC32 takes 41
# bytes, plus the encoding of the payload length; 128 leaves a safe margin.
PAYLOAD_BLOCK_SERIALIZATION_OVERHEAD = 128


@dataclass(frozen=True)
class Bundle:
    """A bundle: the primary block followed by its canonical blocks."""

    primary_block: PrimaryBlock
    blocks: tuple

    def __post_init__(self):
        object.__setattr__(self, "blocks", tuple(self.blocks))

    def to_cbor(self):
        """The bundle as an indefinite-length CBOR array."""
        return IndefiniteArray(
            [self.primary_block.to_cbor(), *(block.to_cbor() for block in self.blocks)]
        )

    @classmethod
    def from_cbor(cls, obj):
        """Decode a bundle from its CBOR array."""
        if not isinstance(obj, (list, tuple)):
            raise SerializationError("bundle must be an array")
        if not obj:
            raise SerializationError("bundle lacks its primary block")
        primary_block = PrimaryBlock.from_cbor(obj[0])
        blocks = [CanonicalBlock.from_cbor(item) for item in obj[1:]]
        if not blocks:
            raise SerializationError("bundle must have at least one block")
        return cls(primary_block, blocks)

    def to_bytes(self):
        return cbor.encode(self.to_cbor())

    @classmethod
    def from_bytes(cls, data):
        return cls.from_cbor(cbor.decode(data))

    def as_hex(self):
        """The encoded bundle as upper-case hexadecimal text."""
        return self.to_bytes().hex().upper()

    @classmethod
    def from_hex(cls, hex_text):
        try:
            data = bytes.fromhex(hex_text)
        except ValueError as exc:
            raise SerializationError(f"invalid hexadecimal text: {exc}") from exc
        return cls.from_bytes(data)

    def validate(self):
        """Whether the primary block and every canonical block are valid."""
        return self.primary_block.validate() and all(b.validate() for b in self.blocks)

    def _payload_canonical_block(self):
        for block in self.blocks:
            if isinstance(block.block, PayloadBlock):
                return block
        raise ValueError("every bundle must contain a payload block")

    def payload_block(self):
        """The payload block of the bundle."""
        return self._payload_canonical_block().block

    def _with_payload_data(self, data):
        blocks = list(self.blocks)
        for index, block in enumerate(blocks):
            if isinstance(block.block, PayloadBlock):
                blocks[index] = replace(block, block=PayloadBlock(data))
                return replace(self, blocks=blocks)
        raise ValueError("every bundle must contain a payload block")

    def fragment(self, max_size):
        """Split the bundle into fragments no larger than max_size bytes.

        Returns the fragments, the minimum size of the first fragment and
        the minimum size of every later fragment.
        """
        if len(self.to_bytes()) <= max_size:
            raise ValueError(
                f"fragmentation not needed, bundle already smaller than {max_size}"
            )
        primary = self.primary_block
        flags = primary.bundle_processing_flags
        if BundleFlags.MUST_NOT_FRAGMENT in flags:
            raise MustNotFragmentError("bundle must not be fragmented")
        if BundleFlags.FRAGMENT in flags and (
            primary.fragment_offset is None or primary.total_data_length is None
        ):
            raise BundleInvalidError("fragment lacks its offset or total data length")

        primary_size = len(cbor.encode(primary.to_cbor()))
        first_fragment_min_size = (
            primary_size + PAYLOAD_BLOCK_SERIALIZATION_OVERHEAD + BUNDLE_SERIALIZATION_OVERHEAD
        )
        fragment_min_size = first_fragment_min_size
        extension_blocks = [b for b in self.blocks if not isinstance(b.block, PayloadBlock)]
        for block in extension_blocks:
            block_size = len(cbor.encode(block.to_cbor()))
            first_fragment_min_size += block_size
            if BlockFlags.MUST_REPLICATE_TO_ALL_FRAGMENTS in block.block_flags:
                fragment_min_size += block_size
        if first_fragment_min_size > max_size or fragment_min_size > max_size:
            raise FragmentTooSmallError(first_fragment_min_size)

        payload_canonical = self._payload_canonical_block()
        data = payload_canonical.block.data
        payload_length = len(data)
        global_offset = primary.fragment_offset or 0
        total_data_length = (
            primary.total_data_length
            if primary.total_data_length is not None
            else payload_length
        )
        new_primary = replace(
            primary,
            bundle_processing_flags=flags | BundleFlags.FRAGMENT,
            fragment_offset=0,
            total_data_length=total_data_length,
        )
        later_blocks = [
            b
            for b in extension_blocks
            if BlockFlags.MUST_REPLICATE_TO_ALL_FRAGMENTS not in b.block_flags
        ]

        fragments = []
        offset = 0
        while offset < payload_length:
            first = offset == 0
            overhead = first_fragment_min_size if first else fragment_min_size
            chunk = min(payload_length - offset, max_size - overhead)
            if chunk < 1:
                raise RuntimeError("would create a fragment with an empty payload block")
            fragment = Bundle(
                replace(new_primary, fragment_offset=global_offset + offset),
                [
                    *(extension_blocks if first else later_blocks),
                    replace(payload_canonical, block=PayloadBlock(data[offset:offset + chunk])),
                ],
            )
            fragment_length = len(fragment.to_bytes())
            if fragment_length > max_size:
                raise RuntimeError(
                    f"built a fragment of size {fragment_length} "
                    f"while fragmenting to size {max_size}"
                )
            fragments.append(fragment)
            offset += chunk
        return fragments, first_fragment_min_size, fragment_min_size


def _sorted_fragments(bundles):
    first = bundles[0]
    if BundleFlags.FRAGMENT not in first.primary_block.bundle_processing_flags:
        raise ValueError("tried to reassemble a bundle that is not a fragment")
    if not all(
        first.primary_block.equals_ignoring_fragment_offset(b.primary_block) for b in bundles
    ):
        raise ValueError(
            "tried to reassemble bundles with different primary blocks; "
            "they probably belong to different bundles"
        )
    if any(b.primary_block.fragment_offset is None for b in bundles):
        raise ValueError("fragment lacks its fragment offset")
    return sorted(bundles, key=lambda b: b.primary_block.fragment_offset)


def can_reassemble_bundles(bundles):
    """Whether the fragments together cover the whole original payload."""
    bundles = list(bundles)
    if not bundles:
        return False
    ordered = _sorted_fragments(bundles)
    total_data_length = ordered[0].primary_block.total_data_length
    if ordered[0].primary_block.fragment_offset != 0:
        return False
    covered = 0
    for bundle in ordered:
        offset = bundle.primary_block.fragment_offset
        end = offset + len(bundle.payload_block().data)
        if offset < covered:
            covered = max(covered, end)
        elif offset != covered:
            return False
        else:
            covered = end
    return covered == total_data_length


def reassemble_bundles(bundles):
    """Rebuild the original bundle from its fragments, or None if some are missing."""
    bundles = list(bundles)
    if not can_reassemble_bundles(bundles):
        return None
    first, *rest = _sorted_fragments(bundles)
    data = bytearray(first.payload_block().data)
    for bundle in rest:
        offset = bundle.primary_block.fragment_offset
        fragment_data = bundle.payload_block().data
        if offset + len(fragment_data) < len(data):
            continue
        data += fragment_data[len(data) - offset:]
    primary = replace(
        first.primary_block,
        bundle_processing_flags=first.primary_block.bundle_processing_flags
        & ~BundleFlags.FRAGMENT,
        fragment_offset=None,
        total_data_length=None,
    )
    return replace(first, primary_block=primary)._with_payload_data(bytes(data))