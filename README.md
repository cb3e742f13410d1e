# dtnbundle

A pure-Python library for Bundle Protocol version 7 (BPv7) bundles, as used in
delay-tolerant networking. It reads and writes bundles in their CBOR wire
format, checks their primary blocks for validity, splits large bundles into
fragments and puts fragments back together. It has no dependencies outside
the standard library.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `dtnbundle.bundle`
  - `Bundle(primary_block, blocks)`: a primary block followed by canonical
    blocks. `to_bytes()` / `Bundle.from_bytes(data)`, `as_hex()` (upper-case
    hex) / `Bundle.from_hex(text)`, `to_cbor()` / `Bundle.from_cbor(obj)`,
    `validate()`, `payload_block()` and `fragment(max_size)`.
  - `fragment(max_size)` returns a tuple of the fragments, the minimum size of
    the first fragment and the minimum size of every later fragment. Blocks
    flagged `MUST_REPLICATE_TO_ALL_FRAGMENTS` are copied into every fragment;
    other extension blocks go into the first fragment only.
  - `can_reassemble_bundles(bundles)`: whether the fragments, in any order
    and possibly overlapping, cover the whole original payload.
  - `reassemble_bundles(bundles)`: the original bundle rebuilt from its
    fragments, or `None` if some of the payload is missing.
- `dtnbundle.primaryblock`: `PrimaryBlock`, with optional CRC and fragment
  fields, `validate()`, `equals_ignoring_fragment_offset(other)` and
  `equals_ignoring_fragment_info(other)`.
- `dtnbundle.blocks`: `CanonicalBlock` (block, number, flags, CRC) and the
  block kinds it carries: `PayloadBlock`, `PreviousNodeBlock`
  (`to_endpoint()`, `PreviousNodeBlock.from_endpoint(endpoint)`),
  `BundleAgeBlock`, `HopCountBlock`, and `UnknownBlock` for any other block
  type. `BlockType` holds the known type codes.
- `dtnbundle.endpoint`: `Endpoint.parse(uri)` for `dtn://...`, `dtn:none`
  style and `ipn:ipn:<node>.<service>` URIs, giving a `DTNEndpoint` or an
  `IPNEndpoint`; `is_null_endpoint()`, `matches_node(other)`,
  `node_endpoint()` and `DTNEndpoint.node_name()`.
- `dtnbundle.flags`: `BundleFlags` and `BlockFlags` (`enum.IntFlag`), each
  with `from_bits_truncate(value)` and `validate()`.
- `dtnbundle.crc`: `CRCKind` and `CRCType`, the CRC kind of a block and the
  CRC value bytes carried with it.
- `dtnbundle.dtntime`: `DtnTime` (milliseconds since 2000-01-01 UTC, with
  `to_datetime()`, `DtnTime.from_datetime(dt)` and `DtnTime.now()`) and
  `CreationTimestamp`.
- `dtnbundle.administrative_record`: `AdministrativeRecord` holding a
  `BundleStatusReport`, built from `BundleStatusInformation`,
  `BundleStatusItem` and `BundleStatusReason`; `to_bytes()` /
  `AdministrativeRecord.from_bytes(data)`.
- `dtnbundle.cbor`: the CBOR `encode(value)` / `decode(data)` used
  throughout; an `IndefiniteArray` list is written as an indefinite-length
  array.
- `dtnbundle.errors`: the exceptions listed below.

## Example

```python
from dtnbundle.blocks import CanonicalBlock, HopCountBlock, PayloadBlock
from dtnbundle.bundle import Bundle, reassemble_bundles
from dtnbundle.crc import CRCType
from dtnbundle.dtntime import CreationTimestamp, DtnTime
from dtnbundle.endpoint import Endpoint
from dtnbundle.flags import BundleFlags
from dtnbundle.primaryblock import PrimaryBlock

source = Endpoint.parse("dtn://node2/incoming")
bundle = Bundle(
    PrimaryBlock(
        version=7,
        bundle_processing_flags=BundleFlags.BUNDLE_DELIVERY_STATUS_REQUESTED,
        crc=CRCType.none(),
        destination_endpoint=Endpoint.parse("dtn://node31/mavlink"),
        source_node=source,
        report_to=source,
        creation_timestamp=CreationTimestamp(DtnTime.now(), 0),
        lifetime=3_600_000,
    ),
    [
        CanonicalBlock(HopCountBlock(limit=32, count=0), block_number=2),
        CanonicalBlock(PayloadBlock(bytes(range(256)) * 4), block_number=1),
    ],
)
assert bundle.validate()

wire = bundle.to_bytes()
assert Bundle.from_bytes(wire) == bundle

fragments, first_min, other_min = bundle.fragment(256)
assert all(len(f.to_bytes()) <= 256 for f in fragments)

restored = reassemble_bundles(reversed(fragments))
assert restored.payload_block().data == bundle.payload_block().data
```

## Errors

- `SerializationError`: bytes, hex text or CBOR values that do not decode
  into the expected structure, or values that cannot be encoded.
- `FragmentationError` and its subclasses, raised by `Bundle.fragment`:
  `FragmentTooSmallError` (the size cannot hold the blocks every fragment
  needs; its `min_size` attribute gives the first fragment's minimum),
  `MustNotFragmentError` (the bundle carries `MUST_NOT_FRAGMENT`) and
  `BundleInvalidError` (a fragment lacking its offset or total length).
- `ValueError`: `Bundle.fragment` on a bundle already no larger than the
  requested size, `payload_block()` on a bundle without a payload block,
  `Endpoint.parse` on a URI it does not understand, and reassembly of
  bundles that are not fragments or belong to different bundles.

## What it does not do

- CRC values are carried and round-tripped, but never computed or checked.
- `CanonicalBlock.validate()` accepts every block; only the primary block is
  checked by `Bundle.validate()`.
- There is no networking, storage, routing or command-line tool: the package
  only models bundles and their wire format.