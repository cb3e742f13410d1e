"""Administrative records and the bundle status reports they carry."""

import enum
from dataclasses import dataclass

from . import cbor
from .cbor import IndefiniteArray
from .dtntime import CreationTimestamp, DtnTime
from .endpoint import Endpoint
from .errors import SerializationError

_UINT_LIMIT = 1 << 64
_BUNDLE_STATUS_REPORT_CODE = 1


def _uint(obj, field):
    if isinstance(obj, bool) or not isinstance(obj, int) or not 0 <= obj < _UINT_LIMIT:
        raise SerializationError(f"field '{field}' must be an unsigned integer, got {obj!r}")
    return obj


def _definite_array(obj, name):
    if not isinstance(obj, (list, tuple)) or isinstance(obj, IndefiniteArray):
        raise SerializationError(f"CBOR array for {name} must have a known length")
    return obj


@dataclass(frozen=True)
class BundleStatusItem:
    """Whether a status is asserted, optionally with the time it happened."""

    is_asserted: bool
    timestamp: DtnTime | None = None

    def to_cbor(self):
        if self.is_asserted and self.timestamp is not None:
            return [True, self.timestamp.to_cbor()]
        return [bool(self.is_asserted)]

    @classmethod
    def from_cbor(cls, obj):
        items = _definite_array(obj, "BundleStatusItem")
        if len(items) > 2:
            raise SerializationError(
                f"a BundleStatusItem must have 1 or 2 elements, got {len(items)}"
            )
        if not items:
            raise SerializationError("missing field 'is_asserted'")
        is_asserted = items[0]
        if not isinstance(is_asserted, bool):
            raise SerializationError(f"field 'is_asserted' must be a boolean, got {is_asserted!r}")
        if len(items) == 2 and not is_asserted:
            raise SerializationError("a status that is not asserted carries no timestamp")
        timestamp = DtnTime.from_cbor(items[1]) if len(items) == 2 else None
        return cls(is_asserted, timestamp)


class BundleStatusReason(enum.IntEnum):
    """Reason codes of a bundle status report."""

    NO_ADDITIONAL_INFORMATION = 0
    LIFETIME_EXPIRED = 1
    FORWARDED_OVER_UNIDIRECTIONAL_LINK = 2
    TRANSMISSION_CANCELED = 3
    DEPLETED_STORAGE = 4
    DESTINATION_ENDPOINT_ID_UNAVAILABLE = 5
    NO_KNOWN_ROUTE_TO_DESTINATION_FROM_HERE = 6
    NO_TIMELY_CONTACT_WITH_NEXT_NODE_ON_ROUTE = 7
    BLOCK_UNINTELLIGIBLE = 8
    HOP_LIMIT_EXCEEDED = 9
    TRAFFIC_PARED = 10
    BLOCK_UNSUPPORTED = 11


@dataclass(frozen=True)
class BundleStatusInformation:
    """The four status items of a bundle status report."""

    received_bundle: BundleStatusItem
    forwarded_bundle: BundleStatusItem
    delivered_bundle: BundleStatusItem
    deleted_bundle: BundleStatusItem

    def to_cbor(self):
        return [
            self.received_bundle.to_cbor(),
            self.forwarded_bundle.to_cbor(),
            self.delivered_bundle.to_cbor(),
            self.deleted_bundle.to_cbor(),
        ]

    @classmethod
    def from_cbor(cls, obj):
        items = _definite_array(obj, "BundleStatusInformation")
        if len(items) != 4:
            raise SerializationError(
                f"a BundleStatusInformation must have 4 elements, got {len(items)}"
            )
        return cls(*(BundleStatusItem.from_cbor(item) for item in items))


@dataclass(frozen=True)
class BundleStatusReport:
    """A report about what happened to a bundle at some node."""

    status_information: BundleStatusInformation
    reason: BundleStatusReason
    bundle_source: Endpoint
    bundle_creation_timestamp: CreationTimestamp
    fragment_offset: int | None = None
    fragment_length: int | None = None

    def to_cbor(self):
        items = [
            self.status_information.to_cbor(),
            int(self.reason),
            self.bundle_source.to_cbor(),
            self.bundle_creation_timestamp.to_cbor(),
        ]
        if self.fragment_offset is not None and self.fragment_length is not None:
            items += [self.fragment_offset, self.fragment_length]
        return items

    @classmethod
    def from_cbor(cls, obj):
        items = _definite_array(obj, "BundleStatusReport")
        if len(items) not in (4, 6):
            raise SerializationError(
                f"a BundleStatusReport must have 4 or 6 elements, got {len(items)}"
            )
        reason_code = _uint(items[1], "reason")
        try:
            reason = BundleStatusReason(reason_code)
        except ValueError:
            raise SerializationError(f"unknown status report reason {reason_code}") from None
        fragment_offset = fragment_length = None
        if len(items) == 6:
            fragment_offset = _uint(items[4], "fragment_offset")
            fragment_length = _uint(items[5], "fragment_length")
        return cls(
            status_information=BundleStatusInformation.from_cbor(items[0]),
            reason=reason,
            bundle_source=Endpoint.from_cbor(items[2]),
            bundle_creation_timestamp=CreationTimestamp.from_cbor(items[3]),
            fragment_offset=fragment_offset,
            fragment_length=fragment_length,
        )


@dataclass(frozen=True)
class AdministrativeRecord:
    """An administrative record; currently always a bundle status report."""

    bundle_status_report: BundleStatusReport

    def to_cbor(self):
        return [_BUNDLE_STATUS_REPORT_CODE, self.bundle_status_report.to_cbor()]

    @classmethod
    def from_cbor(cls, obj):
        if not isinstance(obj, (list, tuple)):
            raise SerializationError("administrative record must be an array")
        if not obj:
            raise SerializationError("missing field 'administrative_record_type'")
        code = _uint(obj[0], "administrative_record_type")
        if code != _BUNDLE_STATUS_REPORT_CODE:
            raise SerializationError(f"unknown administrative record type {code}")
        if len(obj) < 2:
            raise SerializationError("missing field 'bundle_status_report'")
        if len(obj) > 2:
            raise SerializationError("trailing elements in administrative record")
        return cls(BundleStatusReport.from_cbor(obj[1]))

    def to_bytes(self):
        return cbor.encode(self.to_cbor())

    @classmethod
    def from_bytes(cls, data):
        return cls.from_cbor(cbor.decode(data))