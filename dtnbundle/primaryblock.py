"""The primary block of a bundle."""

from dataclasses import dataclass, replace

from .crc import CRCKind, CRCType
from .dtntime import CreationTimestamp
from .endpoint import Endpoint
from .errors import SerializationError
from .cbor import IndefiniteArray
from .flags import BundleFlags

_UINT_LIMIT = 1 << 64


def _uint(obj, field):
    if isinstance(obj, bool) or not isinstance(obj, int) or not 0 <= obj < _UINT_LIMIT:
        raise SerializationError(f"field '{field}' must be an unsigned integer, got {obj!r}")
    return obj


@dataclass(frozen=True)
class PrimaryBlock:
    """The first block of every bundle, describing the bundle as a whole."""

    version: int
    bundle_processing_flags: BundleFlags
    crc: CRCType
    destination_endpoint: Endpoint
    source_node: Endpoint
    report_to: Endpoint
    creation_timestamp: CreationTimestamp
    lifetime: int
    fragment_offset: int | None = None
    total_data_length: int | None = None

    def to_cbor(self):
        """The block as a CBOR array of 8 to 11 elements."""
        items = [
            self.version,
            int(self.bundle_processing_flags),
            self.crc.to_cbor(),
            self.destination_endpoint.to_cbor(),
            self.source_node.to_cbor(),
            self.report_to.to_cbor(),
            self.creation_timestamp.to_cbor(),
            self.lifetime,
        ]
        if self.fragment_offset is not None:
            if self.total_data_length is None:
                raise SerializationError("a fragment needs a total data length")
            items += [self.fragment_offset, self.total_data_length]
        if self.crc.kind is not CRCKind.NONE:
            items.append(self.crc.value_item())
        return items

    @classmethod
    def from_cbor(cls, obj):
        """Decode a primary block from its CBOR array."""
        if not isinstance(obj, (list, tuple)) or isinstance(obj, IndefiniteArray):
            raise SerializationError("primary block must be a definite-length array")
        size = len(obj)
        if not 8 <= size <= 11:
            raise SerializationError(f"primary block has 8 to 11 elements, got {size}")
        flags = BundleFlags.from_bits_truncate(_uint(obj[1], "bundle_processing_flags"))
        crc = CRCType.from_cbor(obj[2])
        fragment_offset = total_data_length = None
        if size in (10, 11):
            fragment_offset = _uint(obj[8], "fragment_offset")
            total_data_length = _uint(obj[9], "total_data_length")
        if size in (9, 11):
            try:
                crc = crc.with_value(obj[-1])
            except ValueError as exc:
                raise SerializationError(str(exc)) from exc
        return cls(
            version=_uint(obj[0], "version"),
            bundle_processing_flags=flags,
            crc=crc,
            destination_endpoint=Endpoint.from_cbor(obj[3]),
            source_node=Endpoint.from_cbor(obj[4]),
            report_to=Endpoint.from_cbor(obj[5]),
            creation_timestamp=CreationTimestamp.from_cbor(obj[6]),
            lifetime=_uint(obj[7], "lifetime"),
            fragment_offset=fragment_offset,
            total_data_length=total_data_length,
        )

    def validate(self):
        """Check the version, the fragment fields and the endpoints."""
        if self.version != 7:
            return False
        if (self.fragment_offset is None) != (self.total_data_length is None):
            return False
        return all(
            endpoint.validate()
            for endpoint in (self.source_node, self.destination_endpoint, self.report_to)
        )

    def equals_ignoring_fragment_offset(self, other):
        """Compare two primary blocks without looking at the fragment offset."""
        return replace(self, fragment_offset=None) == replace(other, fragment_offset=None)

    def equals_ignoring_fragment_info(self, other):
        """Compare two primary blocks without looking at any fragment field."""
        return replace(self, fragment_offset=None, total_data_length=None) == replace(
            other, fragment_offset=None, total_data_length=None
        )