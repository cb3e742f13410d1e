from datetime import datetime, timedelta, timezone

import pytest

from dtnbundle.cbor import decode, encode
from dtnbundle.dtntime import DTN_EPOCH, CreationTimestamp, DtnTime
from dtnbundle.errors import SerializationError

CREATION_TIMESTAMP_SERIALIZATION = bytes(
    [0x82, 0x1A, 0x07, 0x5B, 0xCD, 0x15, 0x1A, 0x3A, 0xDE, 0x68, 0xB1]
)
DTNTIME_SERIALIZATION = bytes([0x1A, 0x07, 0x5B, 0xCD, 0x15])


def test_serialize_creation_timestamp():
    value = CreationTimestamp(DtnTime(123456789), 987654321)
    assert encode(value.to_cbor()) == CREATION_TIMESTAMP_SERIALIZATION


def test_deserialize_creation_timestamp():
    value = CreationTimestamp.from_cbor(decode(CREATION_TIMESTAMP_SERIALIZATION))
    assert value == CreationTimestamp(DtnTime(123456789), 987654321)


def test_serialize_dtntime():
    assert encode(DtnTime(123456789).to_cbor()) == DTNTIME_SERIALIZATION


def test_deserialize_dtntime():
    assert DtnTime.from_cbor(decode(DTNTIME_SERIALIZATION)) == DtnTime(123456789)


def test_zero_is_dtn_epoch():
    assert DtnTime(0).to_datetime() == datetime(2000, 1, 1, tzinfo=timezone.utc)


def test_datetime_round_trip():
    original = DtnTime(681253789438)
    assert DtnTime.from_datetime(original.to_datetime()) == original


def test_naive_datetime_is_utc():
    naive = datetime(2021, 8, 1, 12, 30)
    aware = naive.replace(tzinfo=timezone.utc)
    assert DtnTime.from_datetime(naive) == DtnTime.from_datetime(aware)


def test_other_timezone_is_converted():
    plus_two = timezone(timedelta(hours=2))
    moment = datetime(2010, 5, 5, 14, 0, tzinfo=plus_two)
    assert DtnTime.from_datetime(moment) == DtnTime.from_datetime(
        moment.astimezone(timezone.utc)
    )


def test_before_epoch_is_rejected():
    with pytest.raises(ValueError):
        DtnTime.from_datetime(DTN_EPOCH - timedelta(seconds=1))


def test_now_is_current():
    before = DtnTime.from_datetime(datetime.now(timezone.utc))
    current = DtnTime.now()
    after = DtnTime.from_datetime(datetime.now(timezone.utc))
    assert before <= current <= after


def test_ordering_follows_timestamp():
    assert sorted([DtnTime(5), DtnTime(1), DtnTime(3)]) == [
        DtnTime(1),
        DtnTime(3),
        DtnTime(5),
    ]


def test_repr_mentions_timestamp():
    assert "timestamp=123456789" in repr(DtnTime(123456789))


@pytest.mark.parametrize("obj", [-1, True, "1", 1 << 64, None])
def test_dtntime_from_cbor_rejects_invalid(obj):
    with pytest.raises(SerializationError):
        DtnTime.from_cbor(obj)


@pytest.mark.parametrize("obj", [[1], [1, 2, 3], 5, [1, -2], [True, 1]])
def test_creation_timestamp_from_cbor_rejects_invalid(obj):
    with pytest.raises(SerializationError):
        CreationTimestamp.from_cbor(obj)