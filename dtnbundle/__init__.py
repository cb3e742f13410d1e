"""Bundle Protocol version 7 bundles: encoding, decoding, fragmentation and reassembly."""

__version__ = "0.1.0"

__all__ = [
    "administrative_record",
    "blocks",
    "bundle",
    "cbor",
    "crc",
    "dtntime",
    "endpoint",
    "errors",
    "flags",
    "primaryblock",
]