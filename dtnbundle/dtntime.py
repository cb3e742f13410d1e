"""DTN time and bundle creation timestamps."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .errors import SerializationError

DTN_EPOCH = datetime(2000, 1, 1, tzinfo=timezone.utc)
_MILLISECOND = timedelta(milliseconds=1)
_UINT_LIMIT = 1 << 64


def _uint(obj, field):
    if isinstance(obj, bool) or not isinstance(obj, int) or not 0 <= obj < _UINT_LIMIT:
        raise SerializationError(f"field '{field}' must be an unsigned integer, got {obj!r}")
    return obj


@dataclass(frozen=True, order=True)
class DtnTime:
    """Milliseconds since 2000-01-01T00:00:00Z."""

    timestamp: int

    def __repr__(self):
        try:
            moment = self.to_datetime().isoformat()
        except OverflowError:
            moment = "out of range"
        return f"DtnTime({moment}; timestamp={self.timestamp})"

    def to_datetime(self):
        return DTN_EPOCH + self.timestamp * _MILLISECOND

    @classmethod
    def from_datetime(cls, dt):
        """Convert a datetime; naive datetimes are taken to be UTC."""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        millis = (dt - DTN_EPOCH) // _MILLISECOND
        if millis < 0:
            raise ValueError(f"{dt.isoformat()} lies before the DTN epoch")
        return cls(millis)

    @classmethod
    def now(cls):
        return cls.from_datetime(datetime.now(timezone.utc))

    def to_cbor(self):
        return self.timestamp

    @classmethod
    def from_cbor(cls, obj):
        return cls(_uint(obj, "creation_time"))


@dataclass(frozen=True)
class CreationTimestamp:
    """The creation time of a bundle and its sequence number."""

    creation_time: DtnTime
    sequence_number: int

    def to_cbor(self):
        return [self.creation_time.to_cbor(), self.sequence_number]

    @classmethod
    def from_cbor(cls, obj):
        if not isinstance(obj, (list, tuple)) or len(obj) != 2:
            raise SerializationError("creation timestamp must be an array of 2 elements")
        creation_time, sequence_number = obj
        return cls(DtnTime.from_cbor(creation_time), _uint(sequence_number, "sequence_number"))