"""Block and bundle processing control flags."""

import enum
import functools
import operator


def _all_bits(flag_class):
    return functools.reduce(operator.or_, (member.value for member in flag_class), 0)


class BlockFlags(enum.IntFlag):
    """Block processing control flags of a canonical block."""

    MUST_REPLICATE_TO_ALL_FRAGMENTS = 0x01
    STATUS_REPORT_REQUESTED_WHEN_NOT_PROCESSABLE = 0x02
    DELETE_BUNDLE_WHEN_NOT_PROCESSABLE = 0x04
    DELETE_BLOCK_WHEN_NOT_PROCESSABLE = 0x10

    @classmethod
    def from_bits_truncate(cls, value):
        """Build flags from an integer, dropping bits that are not defined."""
        return cls(int(value) & _all_bits(cls))

    def validate(self):
        """Every combination of block flags is valid."""
        return True


class BundleFlags(enum.IntFlag):
    """Bundle processing control flags of the primary block."""

    FRAGMENT = 0x000001
    ADMINISTRATIVE_RECORD = 0x000002
    MUST_NOT_FRAGMENT = 0x000004
    APPLICATION_ACKNOWLEGEMENT_REQUESTED = 0x000020
    STATUS_TIME_REQUESTED = 0x000040
    BUNDLE_RECEIPTION_STATUS_REQUESTED = 0x004000
    BUNDLE_FORWARDING_STATUS_REQUEST = 0x010000
    BUNDLE_DELIVERY_STATUS_REQUESTED = 0x020000
    BUNDLE_DELETION_STATUS_REQUESTED = 0x040000

    @classmethod
    def from_bits_truncate(cls, value):
        """Build flags from an integer, dropping bits that are not defined."""
        return cls(int(value) & _all_bits(cls))

    def validate(self):
        """An administrative record must not request status reports."""
        return not (
            BundleFlags.ADMINISTRATIVE_RECORD in self and self & _STATUS_REQUESTS
        )


_STATUS_REQUESTS = (
    BundleFlags.BUNDLE_RECEIPTION_STATUS_REQUESTED
    | BundleFlags.BUNDLE_FORWARDING_STATUS_REQUEST
    | BundleFlags.BUNDLE_DELIVERY_STATUS_REQUESTED
    | BundleFlags.BUNDLE_DELETION_STATUS_REQUESTED
)