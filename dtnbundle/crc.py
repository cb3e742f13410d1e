"""CRC type of a block and the CRC value carried with it."""

import enum
from dataclasses import dataclass

from .errors import SerializationError


class CRCKind(enum.IntEnum):
    """The CRC type code carried on the wire."""

    NONE = 0
    CRC16 = 1
    CRC32 = 2


_VALUE_SIZES = {CRCKind.NONE: 0, CRCKind.CRC16: 2, CRCKind.CRC32: 4}


@dataclass(frozen=True)
class CRCType:
    """A CRC type together with its value bytes (empty for no CRC)."""

    kind: CRCKind = CRCKind.NONE
    value: bytes = b""

    def __post_init__(self):
        kind = CRCKind(self.kind)
        value = bytes(self.value)
        if len(value) != _VALUE_SIZES[kind]:
            raise ValueError(
                f"{kind.name} needs {_VALUE_SIZES[kind]} value bytes, got {len(value)}"
            )
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "value", value)

    @classmethod
    def none(cls):
        return cls(CRCKind.NONE)

    @classmethod
    def crc16(cls, value):
        return cls(CRCKind.CRC16, value)

    @classmethod
    def crc32(cls, value):
        return cls(CRCKind.CRC32, value)

    def to_cbor(self):
        """The CRC type code that is written into a block."""
        return int(self.kind)

    @classmethod
    def from_cbor(cls, obj):
        """Read a CRC type code; the value bytes start out as zeros."""
        if isinstance(obj, bool) or not isinstance(obj, int):
            raise SerializationError(f"crc type must be an unsigned integer, got {obj!r}")
        try:
            kind = CRCKind(obj)
        except ValueError:
            raise SerializationError(
                f"crc type must be between 0 and 2, got {obj}"
            ) from None
        return cls(kind, bytes(_VALUE_SIZES[kind]))

    def with_value(self, obj):
        """Return a CRCType of this kind carrying the decoded CRC value."""
        if self.kind is CRCKind.NONE:
            raise ValueError("a block without CRC carries no CRC value")
        if obj is None:
            raise SerializationError("missing crc content")
        if isinstance(obj, (list, tuple)):
            if not all(
                isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255
                for b in obj
            ):
                raise SerializationError("crc content must be bytes")
            obj = bytes(obj)
        if not isinstance(obj, (bytes, bytearray)):
            raise SerializationError("crc content must be bytes")
        expected = _VALUE_SIZES[self.kind]
        if len(obj) != expected:
            raise SerializationError(
                f"expected {expected} bytes for {self.kind.name.lower()}, got {len(obj)}"
            )
        return CRCType(self.kind, bytes(obj))

    def value_item(self):
        """The CRC value as it is appended to a block."""
        if self.kind is CRCKind.NONE:
            raise ValueError("a block without CRC carries no CRC value")
        return self.value